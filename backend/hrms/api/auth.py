"""
Login, logout and current-user handlers.

Login is the only place a session is created; the authentication
middleware re-validates it on every later request.
"""

import logging
from typing import Callable

from sqlalchemy.orm import Session

from hrms.core.errors import Unauthorized
from hrms.core.metrics import record_login_attempt
from hrms.core.security import verify_password
from hrms.core.validation import validate_body
from hrms.crud.roles import get_permission_names_for_role
from hrms.crud.users import find_active_identity, get_user_by_email, get_user_by_id, update_last_login
from hrms.dispatch.context import RequestContext
from hrms.dispatch.responses import ApiResponse
from hrms.models.enums import UserStatusEnum
from hrms.schemas.auth import CurrentUser, LoginRequest, SessionUser
from hrms.tenancy.constants import SESSION_PERMISSIONS_KEY, SESSION_USER_KEY
from hrms.tenancy.sessions import SessionStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
ACCOUNT_INACTIVE = "Your account is not active. Please contact administrator."


class AuthController:
    def __init__(self, session_factory: Callable[[], Session], session_store: SessionStore) -> None:
        self._session_factory = session_factory
        self._sessions = session_store

    def login(self, ctx: RequestContext) -> ApiResponse:
        payload = validate_body(LoginRequest, ctx.body)
        with self._session_factory() as db:
            user = get_user_by_email(db, payload.email)
            if user is None or not verify_password(payload.password, user.password_hash):
                record_login_attempt("fail")
                logger.info("auth.login_failed", extra={"request_id": ctx.request_id})
                raise Unauthorized(INVALID_CREDENTIALS)
            if user.status != UserStatusEnum.ACTIVE:
                record_login_attempt("inactive")
                logger.info(
                    "auth.login_inactive",
                    extra={"request_id": ctx.request_id, "user_id": user.id},
                )
                raise Unauthorized(ACCOUNT_INACTIVE)

            identity = find_active_identity(db, user.id)
            permissions = get_permission_names_for_role(db, user.role_id)
            update_last_login(db, user)

        # A fresh id on every login; any session the caller brought is dropped.
        if ctx.session_id:
            self._sessions.destroy(ctx.session_id)
        session_user = identity.to_session()
        session_id = self._sessions.create(
            {SESSION_USER_KEY: session_user, SESSION_PERMISSIONS_KEY: permissions}
        )
        record_login_attempt("success")
        logger.info(
            "auth.login_succeeded",
            extra={"request_id": ctx.request_id, "user_id": identity.id, "company_id": identity.company_id},
        )

        response = ApiResponse.success(
            {"user": SessionUser(**session_user).model_dump(), "permissions": permissions},
            "Login successful",
        )
        response.session_id = session_id
        return response

    def logout(self, ctx: RequestContext) -> ApiResponse:
        if ctx.session_id:
            self._sessions.destroy(ctx.session_id)
        response = ApiResponse.success(None, "Logout successful")
        response.clear_session = True
        return response

    def me(self, ctx: RequestContext) -> ApiResponse:
        with self._session_factory() as db:
            user = get_user_by_id(db, ctx.user_id())
            employee = user.employee if user else None
            current = CurrentUser(
                **ctx.user.to_session(),
                first_name=employee.first_name if employee else None,
                last_name=employee.last_name if employee else None,
                employee_code=employee.employee_code if employee else None,
                last_login=user.last_login if user else None,
            )
        return ApiResponse.success(
            {"user": current.model_dump(mode="json"), "permissions": sorted(ctx.permissions)}
        )

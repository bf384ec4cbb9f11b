"Request dispatch: route table, request context, response envelope and middleware chain."

from .context import RequestContext, build_context  # noqa: F401
from .responses import ApiResponse  # noqa: F401
from .routes import Route, RouteSpec, RouteTable, register_routes  # noqa: F401
from .chain import run_chain  # noqa: F401
from .registry import MiddlewareRegistry  # noqa: F401
from .dispatcher import Dispatcher, assemble_chain  # noqa: F401

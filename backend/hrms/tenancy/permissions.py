"""
Permission catalogue and the default grants for the seeded roles.

Permission names follow ``<module>.<action>``.
"""

PERMISSIONS = {
    # Employee
    "employee.view": "View all employees",
    "employee.view_own": "View own profile",
    "employee.create": "Create employees",
    "employee.update": "Update employees",
    "employee.update_own": "Update own profile",
    "employee.delete": "Delete employees",
    # Attendance
    "attendance.view": "View all attendance records",
    "attendance.view_own": "View own attendance",
    "attendance.clock": "Clock in/out",
    "attendance.create": "Create attendance records",
    "attendance.update": "Update attendance records",
    # Leave
    "leave.view": "View all leave requests",
    "leave.view_own": "View own leave requests",
    "leave.request": "Submit leave requests",
    "leave.approve": "Approve/reject leave requests",
    # Payroll
    "payroll.view": "View all payroll records",
    "payroll.view_own": "View own payroll",
    "payroll.create": "Process payroll",
}

ROLE_ADMIN = "Admin"
ROLE_HR = "HR"
ROLE_EMPLOYEE = "Employee"

ROLE_DESCRIPTIONS = {
    ROLE_ADMIN: "Company administrator",
    ROLE_HR: "Human resources staff",
    ROLE_EMPLOYEE: "Regular employee",
}

_SELF_SERVICE = [
    "employee.view_own",
    "employee.update_own",
    "attendance.view_own",
    "attendance.clock",
    "leave.view_own",
    "leave.request",
    "payroll.view_own",
]

ROLE_PERMISSIONS = {
    # Admin bypasses RBAC; the full grant keeps audit listings accurate.
    ROLE_ADMIN: list(PERMISSIONS),
    ROLE_HR: _SELF_SERVICE
    + [
        "employee.view",
        "employee.create",
        "employee.update",
        "attendance.view",
        "attendance.create",
        "attendance.update",
        "leave.view",
        "leave.approve",
        "payroll.view",
    ],
    ROLE_EMPLOYEE: list(_SELF_SERVICE),
}


def module_of(permission: str) -> str:
    module, _, action = permission.partition(".")
    if not module or not action:
        raise ValueError(f"Permission '{permission}' must look like '<module>.<action>'")
    return module

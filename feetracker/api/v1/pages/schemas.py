from typing import List

from pydantic import BaseModel

from feetracker.core.enums import Role


class Tool(BaseModel):
    title: str
    description: str
    path: str


class DashboardResponse(BaseModel):
    full_name: str
    role: Role
    tools: List[Tool]


ADMIN_TOOLS = [
    Tool(title="Set Up Term", description="Set each class's fees for the new term.", path="/api/v1/classes"),
    Tool(title="Manage Students", description="Add, edit or remove students.", path="/api/v1/students"),
    Tool(title="Manage Classes", description="Add or modify classes.", path="/api/v1/classes"),
    Tool(title="Manage Staff", description="Create staff accounts or change roles.", path="/api/v1/staff"),
    Tool(title="View Reports", description="View fee balances and payment history.", path="/api/v1/reports/school"),
]

STAFF_TOOLS = [
    Tool(title="Scan Student QR", description="Record daily feeding and transport fees.", path="/api/v1/scan"),
    Tool(title="View Records", description="Check daily payment records.", path="/api/v1/records"),
]

TOOLS_BY_ROLE = {
    Role.ADMIN: ADMIN_TOOLS,
    Role.STAFF: STAFF_TOOLS,
}

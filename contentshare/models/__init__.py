from .user import User, Role  # noqa: F401
from .content import Content  # noqa: F401
from .content_element import ContentElement  # noqa: F401
from .link import Link, LinkState  # noqa: F401
from .response import Response, ResponseDetail  # noqa: F401
from .audit_log import AuditLog  # noqa: F401

# Import ALL models so SQLAlchemy registers them

__all__ = [
    "User",
    "Role",
    "Content",
    "ContentElement",
    "Link",
    "LinkState",
    "Response",
    "ResponseDetail",
    "AuditLog",
]

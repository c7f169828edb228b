"""
Authorization decisions for content, elements, links, analytics and the dashboard.

Decisions come from ``POLICY``, a table of role -> action -> rule. Actions a
role has no entry for are denied. The engine holds no state of its own; it
only reads secret codes from the injected secret store.
"""
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

from flask import current_app

from ..errors import Forbidden
from ..models.content import Content
from ..models.user import Role
from ..utils.tokens import constant_time_equals
from .secret_store import SecretStore, content_secret_key, link_secret_key


class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    LIST = "list"
    UPDATE = "update"
    DELETE = "delete"
    SHARE = "share"
    ANALYZE = "analyze"
    PARTICIPATE = "participate"


@dataclass(frozen=True)
class Subject:
    id: Optional[uuid.UUID]
    role: Role

    @classmethod
    def guest(cls) -> "Subject":
        return cls(id=None, role=Role.GUEST)

    @property
    def is_guest(self) -> bool:
        return self.role == Role.GUEST


@dataclass(frozen=True)
class Resource:
    """What a decision is about. For elements and links, owner/visibility come from the parent content."""

    owner_id: Optional[uuid.UUID] = None
    content_id: Optional[uuid.UUID] = None
    content_type: Optional[str] = None
    is_public: bool = False

    @classmethod
    def for_content(cls, content: Content) -> "Resource":
        return cls(
            owner_id=content.owner_id,
            content_id=content.id,
            content_type=content.type,
            is_public=bool(content.is_public),
        )


@dataclass(frozen=True)
class AccessRequest:
    subject: Subject
    resource: Resource
    secret_code: Optional[str] = None
    link_token: Optional[str] = None


Rule = Callable[["AccessPolicy", AccessRequest], bool]


def _allow(policy, req: AccessRequest) -> bool:
    return True


def _owner(policy, req: AccessRequest) -> bool:
    return (
        req.subject.id is not None
        and req.resource.owner_id is not None
        and req.subject.id == req.resource.owner_id
    )


def _quiz_only(policy, req: AccessRequest) -> bool:
    return req.resource.content_type == Content.TYPE_QUIZ


def _readable(policy, req: AccessRequest) -> bool:
    # public -> owner -> secret code (admins never reach here)
    if req.resource.is_public:
        return True
    if _owner(policy, req):
        return True
    return policy.secret_code_matches(req)


POLICY: Dict[Role, Dict[Action, Rule]] = {
    Role.ADMIN: {action: _allow for action in Action},
    Role.REGISTERED: {
        Action.CREATE: _allow,
        Action.READ: _readable,
        Action.LIST: _allow,
        Action.UPDATE: _owner,
        Action.DELETE: _owner,
        Action.SHARE: _owner,
        Action.ANALYZE: _owner,
        Action.PARTICIPATE: _readable,
    },
    Role.GUEST: {
        Action.CREATE: _quiz_only,
        Action.READ: _readable,
        Action.PARTICIPATE: _readable,
    },
}


class AccessPolicy:
    def __init__(self, secret_store: SecretStore, policy: Dict[Role, Dict[Action, Rule]] = POLICY):
        self.secret_store = secret_store
        self.policy = policy

    def can_access(
        self,
        subject: Subject,
        resource: Resource,
        action: Action,
        secret_code: Optional[str] = None,
        link_token: Optional[str] = None,
    ) -> bool:
        rule = self.policy.get(subject.role, {}).get(action)
        if rule is None:
            return False
        return rule(self, AccessRequest(subject, resource, secret_code, link_token))

    def require(
        self,
        subject: Subject,
        resource: Resource,
        action: Action,
        secret_code: Optional[str] = None,
        link_token: Optional[str] = None,
    ) -> None:
        if self.can_access(subject, resource, action, secret_code, link_token):
            return

        current_app.logger.info(
            "Access denied action=%s role=%s content_id=%s",
            action.value, subject.role.value, resource.content_id,
        )
        rule = self.policy.get(subject.role, {}).get(action)
        if rule is _readable and not resource.is_public:
            # Missing, expired and wrong codes all look the same to the caller
            raise Forbidden("Invalid or missing secret code")
        if rule is _quiz_only:
            raise Forbidden("Guests can only create Quiz content")
        if subject.is_guest:
            raise Forbidden("Guests are not allowed to perform this action")
        raise Forbidden()

    def grants(self, subject: Subject, action: Action) -> bool:
        """Whether the role can ever perform ``action``, before any resource is looked up."""
        return action in self.policy.get(subject.role, {})

    def require_grant(self, subject: Subject, action: Action) -> None:
        if not self.grants(subject, action):
            current_app.logger.info("Action not granted action=%s role=%s", action.value, subject.role.value)
            raise Forbidden("Guests are not allowed to perform this action" if subject.is_guest else None)

    def owner_scope(self, subject: Subject) -> Optional[uuid.UUID]:
        """
        Owner filter for collection reads: ``None`` means every row (admins),
        otherwise the subject's own id. Guests are refused outright.
        """
        self.require_grant(subject, Action.LIST)
        if subject.role == Role.ADMIN:
            return None
        return subject.id

    def secret_code_matches(self, req: AccessRequest) -> bool:
        if not req.secret_code:
            return False
        keys = []
        if req.link_token:
            keys.append(link_secret_key(req.link_token))
        if req.resource.content_id is not None:
            keys.append(content_secret_key(req.resource.content_id))
        return any(
            constant_time_equals(req.secret_code, self.secret_store.get(key))
            for key in keys
        )

"""
Share-link lifecycle: generate, validate, redeem, update, delete, list.

A link is ``active`` until it is ``expired`` (time) or ``exhausted``
(access count reached ``max_access``). Both end states are derived from the
stored row on every call, never cached.

Redemption is an unconditional ``access_count + 1`` in the caller's
transaction. Two participants racing at the ``max_access`` boundary can both
pass validation before either increments, so the cap is a soft one.
"""
from datetime import datetime
from typing import List, Optional, Tuple

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..errors import IntegrityFailure, LinkExhausted, LinkExpired, NotFound
from ..extensions import db
from ..models.content import Content
from ..models.link import Link, LinkState
from ..utils.tokens import generate_hex_token
from .access_policy import AccessPolicy, Action, Resource, Subject
from .secret_store import SecretStore, link_secret_key

_UNSET = object()


class LinkManager:
    TOKEN_BYTES = 16

    def __init__(self, secret_store: SecretStore, policy: AccessPolicy, secret_code_ttl_seconds: int = 3600):
        self.secret_store = secret_store
        self.policy = policy
        self.secret_code_ttl = secret_code_ttl_seconds

    def generate(
        self,
        subject: Subject,
        content: Content,
        expiration_date: Optional[datetime] = None,
        max_access: Optional[int] = None,
        secret_code: Optional[str] = None,
    ) -> Link:
        self.policy.require(subject, Resource.for_content(content), Action.SHARE)

        link = Link(
            content_id=content.id,
            token=generate_hex_token(self.TOKEN_BYTES),
            expiration_date=expiration_date,
            max_access=max_access,
            access_count=0,
        )
        try:
            db.session.add(link)
            db.session.flush()
        except IntegrityError as e:
            # 128 random bits: a collision means something is badly wrong, never retry
            db.session.rollback()
            raise IntegrityFailure("Link token uniqueness violated") from e

        if secret_code:
            self.secret_store.set(link_secret_key(link.token), secret_code, self.secret_code_ttl)
        return link

    def validate(self, token: str, now: Optional[datetime] = None) -> Link:
        link = Link.query.filter_by(token=token).first()
        if not link:
            raise NotFound("Invalid or expired link")

        state = link.state(now)
        if state == LinkState.EXPIRED:
            current_app.logger.debug("Link expired link_id=%s", link.id)
            raise LinkExpired()
        if state == LinkState.EXHAUSTED:
            current_app.logger.debug("Link exhausted link_id=%s count=%s", link.id, link.access_count)
            raise LinkExhausted()
        return link

    def resolve(self, token: str, now: Optional[datetime] = None) -> Tuple[Link, Content]:
        """Validate ``token`` and load the content behind it."""
        link = self.validate(token, now)
        content = db.session.get(Content, link.content_id) if link.content_id else None
        if not content:
            raise NotFound("Content not found")
        return link, content

    def redeem(self, link: Link) -> None:
        """Count one completed participation. Committed by the caller with the rest of the work."""
        db.session.execute(
            update(Link)
            .where(Link.id == link.id)
            .values(access_count=Link.access_count + 1)
        )

    def update_settings(self, subject: Subject, token: str, expiration_date=_UNSET, max_access=_UNSET) -> Link:
        link, _ = self._owned_link(subject, token, Action.UPDATE)
        if expiration_date is not _UNSET:
            link.expiration_date = expiration_date
        if max_access is not _UNSET:
            link.max_access = max_access
        db.session.flush()
        return link

    def delete(self, subject: Subject, token: str) -> Link:
        """Delete the row. The caller commits, then calls ``forget_secret_code``."""
        link, _ = self._owned_link(subject, token, Action.DELETE)
        db.session.delete(link)
        db.session.flush()
        return link

    def forget_secret_code(self, token: str) -> None:
        self.secret_store.delete(link_secret_key(token))

    def list_links(self, subject: Subject) -> List[Tuple[Link, Optional[Content]]]:
        """Links with their content; admins also see links whose content is gone (content None)."""
        owner_id = self.policy.owner_scope(subject)
        q = (
            db.session.query(Link, Content)
            .outerjoin(Content, Link.content_id == Content.id)
        )
        if owner_id is not None:
            q = q.filter(Content.owner_id == owner_id)
        return q.order_by(Link.created_at.desc()).all()

    def _owned_link(self, subject: Subject, token: str, action: Action) -> Tuple[Link, Optional[Content]]:
        self.policy.require_grant(subject, action)

        row = (
            db.session.query(Link, Content)
            .outerjoin(Content, Link.content_id == Content.id)
            .filter(Link.token == token)
            .first()
        )
        if row is None:
            raise NotFound("Link not found")

        link, content = row
        # A link orphaned by content deletion has no owner left; only admins pass
        resource = Resource.for_content(content) if content is not None else Resource()
        self.policy.require(subject, resource, action)
        return link, content

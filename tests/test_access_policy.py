import uuid

import pytest

from contentshare.errors import Forbidden
from contentshare.models.user import Role
from contentshare.services.access_policy import AccessPolicy, Action, Resource, Subject
from contentshare.services.secret_store import content_secret_key, link_secret_key

OWNER_ID = uuid.uuid4()
CONTENT_ID = uuid.uuid4()


@pytest.fixture
def policy(store):
    return AccessPolicy(store)


def _private(content_type="Survey"):
    return Resource(owner_id=OWNER_ID, content_id=CONTENT_ID, content_type=content_type, is_public=False)


def _public():
    return Resource(owner_id=OWNER_ID, content_id=CONTENT_ID, content_type="Survey", is_public=True)


owner = Subject(id=OWNER_ID, role=Role.REGISTERED)
stranger = Subject(id=uuid.uuid4(), role=Role.REGISTERED)
admin = Subject(id=uuid.uuid4(), role=Role.ADMIN)
guest = Subject.guest()


@pytest.mark.parametrize("action", list(Action))
def test_admin_is_allowed_everything(policy, action):
    assert policy.can_access(admin, _private(), action) is True


@pytest.mark.parametrize("action", [Action.UPDATE, Action.DELETE, Action.SHARE, Action.ANALYZE])
def test_owner_only_actions(policy, action):
    assert policy.can_access(owner, _private(), action) is True
    assert policy.can_access(stranger, _private(), action) is False
    assert policy.can_access(guest, _private(), action) is False


@pytest.mark.parametrize("action", [Action.LIST, Action.UPDATE, Action.DELETE, Action.SHARE, Action.ANALYZE])
def test_guest_is_denied_outside_read_and_create(policy, action):
    assert policy.can_access(guest, _public(), action) is False


@pytest.mark.parametrize("content_type,allowed", [("Quiz", True), ("Survey", False), ("WordCloud", False)])
def test_guest_may_only_create_quizzes(policy, content_type, allowed):
    resource = Resource(content_type=content_type)
    assert policy.can_access(guest, resource, Action.CREATE) is allowed


def test_registered_may_create_any_type(policy):
    assert policy.can_access(stranger, Resource(content_type="MindMap"), Action.CREATE) is True


@pytest.mark.parametrize("subject", [owner, stranger, admin, guest])
@pytest.mark.parametrize("action", [Action.READ, Action.PARTICIPATE])
def test_public_content_is_readable_by_everyone(policy, subject, action):
    assert policy.can_access(subject, _public(), action) is True


def test_private_content_needs_owner_admin_or_code(policy, store):
    store.set(content_secret_key(CONTENT_ID), "c0ffee", 3600)

    assert policy.can_access(owner, _private(), Action.READ) is True
    assert policy.can_access(admin, _private(), Action.READ) is True
    assert policy.can_access(stranger, _private(), Action.READ) is False
    assert policy.can_access(stranger, _private(), Action.READ, secret_code="nope") is False
    assert policy.can_access(stranger, _private(), Action.READ, secret_code="c0ffee") is True
    assert policy.can_access(guest, _private(), Action.READ, secret_code="c0ffee") is True


def test_expired_code_behaves_like_a_wrong_one(policy, store):
    store.set(content_secret_key(CONTENT_ID), "c0ffee", 3600)
    store.advance(3600)

    assert policy.can_access(guest, _private(), Action.READ, secret_code="c0ffee") is False


def test_link_scoped_code_is_accepted_for_link_reads(policy, store):
    store.set(link_secret_key("abc123"), "linkcode", 3600)

    assert policy.can_access(guest, _private(), Action.READ, secret_code="linkcode", link_token="abc123") is True
    # Without the link the link-scoped code means nothing
    assert policy.can_access(guest, _private(), Action.READ, secret_code="linkcode") is False


def test_require_reports_missing_and_wrong_codes_identically(app, policy, store):
    store.set(content_secret_key(CONTENT_ID), "c0ffee", 3600)

    with app.app_context():
        with pytest.raises(Forbidden) as missing:
            policy.require(stranger, _private(), Action.READ)
        with pytest.raises(Forbidden) as wrong:
            policy.require(stranger, _private(), Action.READ, secret_code="bad")

    assert missing.value.message == wrong.value.message == "Invalid or missing secret code"


def test_require_explains_guest_create_denial(app, policy):
    with app.app_context():
        with pytest.raises(Forbidden) as exc:
            policy.require(guest, Resource(content_type="Survey"), Action.CREATE)
    assert exc.value.message == "Guests can only create Quiz content"


def test_owner_scope(app, policy):
    with app.app_context():
        assert policy.owner_scope(admin) is None
        assert policy.owner_scope(owner) == OWNER_ID
        with pytest.raises(Forbidden):
            policy.owner_scope(guest)


def test_unknown_role_entries_are_denied(store):
    narrow = AccessPolicy(store, policy={Role.ADMIN: {Action.READ: lambda p, r: True}})
    assert narrow.can_access(admin, _public(), Action.READ) is True
    assert narrow.can_access(admin, _public(), Action.DELETE) is False
    assert narrow.can_access(owner, _public(), Action.READ) is False

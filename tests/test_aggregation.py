import pytest

from contentshare.extensions import db
from contentshare.models.content import Content
from contentshare.models.content_element import ContentElement
from contentshare.models.response import Response, ResponseDetail
from contentshare.services.aggregation import average_score, completion_rate, extract_score


@pytest.mark.parametrize("answer,expected", [
    ({"score": 3}, 3.0),
    ({"score": 2.5}, 2.5),
    ({"score": "4"}, 4.0),
    ({"score": "n/a"}, None),
    ({"score": True}, None),
    ({"score": "NaN"}, None),
    ({"score": "inf"}, None),
    ({"score": "-Infinity"}, None),
    ({"score": float("inf")}, None),
    ({"score": float("nan")}, None),
    ({"choice": "B"}, None),
    ("plain text", None),
    (None, None),
])
def test_extract_score(answer, expected):
    assert extract_score(answer) == expected


def test_completion_rate_is_none_without_participants():
    assert completion_rate(0, 0) is None


@pytest.mark.parametrize("total,completed,expected", [(4, 1, 0.25), (3, 3, 1.0), (2, 0, 0.0)])
def test_completion_rate_bounds(total, completed, expected):
    assert completion_rate(total, completed) == expected


def test_average_score_falls_back_to_zero():
    assert average_score([]) == 0
    assert average_score([{"choice": "A"}, None]) == 0


def test_average_score_ignores_unscored_answers():
    assert average_score([{"score": 1}, {"score": 3}, {"choice": "A"}]) == 2


def test_average_score_ignores_non_finite_scores():
    assert average_score([{"score": 4}, {"score": "NaN"}, {"score": float("-inf")}]) == 4


def _content(owner_id, content_type="Quiz"):
    item = Content(owner_id=owner_id, title="T", type=content_type, is_public=True, settings={})
    db.session.add(item)
    db.session.flush()
    element = ContentElement(content_id=item.id, element_type="Question", data={"text": "?"}, position=1)
    db.session.add(element)
    db.session.flush()
    return item, element


def _respond(content, element, completed=True, answer=None):
    response = Response(content_id=content.id, is_guest=True, guest_name="g", completed=completed)
    response.details.append(ResponseDetail(element_id=element.id, answer=answer))
    db.session.add(response)


def test_content_stats_with_no_participants(app, make_user):
    owner_id = make_user()
    with app.app_context():
        content, _ = _content(owner_id)
        db.session.commit()

        stats = app.extensions["aggregation"].content_stats(content.id)

    assert stats == {
        "total_participants": 0,
        "completion_rate": None,
        "average_score": 0,
        "content_id": str(content.id),
    }


def test_content_stats_counts_responses(app, make_user):
    owner_id = make_user()
    with app.app_context():
        content, element = _content(owner_id)
        _respond(content, element, completed=True, answer={"score": 4})
        _respond(content, element, completed=False, answer={"score": 2})
        _respond(content, element, completed=True, answer={"choice": "A"})
        db.session.commit()

        stats = app.extensions["aggregation"].content_stats(content.id)

    assert stats["total_participants"] == 3
    assert stats["completion_rate"] == pytest.approx(2 / 3)
    assert stats["average_score"] == 3


def test_dashboard_overview_is_scoped(app, make_user):
    alice = make_user()
    bob = make_user()
    with app.app_context():
        quiz, element = _content(alice, "Quiz")
        _content(alice, "Survey")
        _content(bob, "Survey")
        _respond(quiz, element, answer={"score": 10})
        db.session.commit()

        engine = app.extensions["aggregation"]
        mine = engine.dashboard_overview(alice)
        theirs = engine.dashboard_overview(bob)
        everything = engine.dashboard_overview(None)

    assert mine["total_content"] == 2
    assert mine["content_type_breakdown"] == [{"type": "Quiz", "count": 1}, {"type": "Survey", "count": 1}]
    assert mine["total_participants"] == 1
    assert mine["completion_rate"] == 1.0
    assert mine["average_score"] == 10

    assert theirs["total_content"] == 1
    assert theirs["total_participants"] == 0
    assert theirs["completion_rate"] is None
    assert theirs["average_score"] == 0

    assert everything["total_content"] == 3
    assert everything["content_type_breakdown"] == [{"type": "Quiz", "count": 1}, {"type": "Survey", "count": 2}]

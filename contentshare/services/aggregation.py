"""
Read-only rollups over responses.

Note the asymmetry: ``completion_rate`` is ``None`` when nobody took part,
while ``average_score`` falls back to ``0`` when no answer carries a score.
"""
import math
import uuid
from numbers import Number
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func, select

from ..extensions import db
from ..models.content import Content
from ..models.response import Response, ResponseDetail


def extract_score(answer: Any) -> Optional[float]:
    """Numeric ``score`` field of an answer, or None if the answer is unscored."""
    if not isinstance(answer, dict):
        return None
    score = answer.get("score")
    if isinstance(score, bool):
        return None
    if isinstance(score, Number):
        value = float(score)
    elif isinstance(score, str):
        try:
            value = float(score)
        except ValueError:
            return None
    else:
        return None
    # NaN and infinities are not scores
    return value if math.isfinite(value) else None


def completion_rate(total: int, completed: int) -> Optional[float]:
    if not total:
        return None
    return completed / total


def average_score(answers: Iterable[Any]) -> float:
    scores = [s for s in (extract_score(a) for a in answers) if s is not None]
    if not scores:
        return 0
    return sum(scores) / len(scores)


class AggregationEngine:
    def content_stats(self, content_id: uuid.UUID) -> Dict[str, Any]:
        scope = Response.content_id == content_id
        return self._rollup(scope, content_id=content_id)

    def dashboard_overview(self, owner_id: Optional[uuid.UUID]) -> Dict[str, Any]:
        """Same metrics across every content row owned by ``owner_id`` (all rows when None)."""
        content_q = select(Content.id)
        if owner_id is not None:
            content_q = content_q.where(Content.owner_id == owner_id)

        total_content = db.session.query(func.count(Content.id))
        breakdown_q = db.session.query(Content.type, func.count(Content.id)).group_by(Content.type)
        if owner_id is not None:
            total_content = total_content.filter(Content.owner_id == owner_id)
            breakdown_q = breakdown_q.filter(Content.owner_id == owner_id)

        breakdown: List[Dict[str, Any]] = [
            {"type": content_type, "count": int(count)}
            for content_type, count in breakdown_q.order_by(Content.type.asc()).all()
        ]

        overview = self._rollup(Response.content_id.in_(content_q))
        overview.update({
            "total_content": int(total_content.scalar() or 0),
            "content_type_breakdown": breakdown,
        })
        return overview

    def _rollup(self, scope, content_id: Optional[uuid.UUID] = None) -> Dict[str, Any]:
        total = db.session.query(func.count(Response.id)).filter(scope).scalar() or 0
        completed = (
            db.session.query(func.count(Response.id))
            .filter(scope, Response.completed.is_(True))
            .scalar()
            or 0
        )
        answers = [
            row.answer
            for row in (
                db.session.query(ResponseDetail.answer)
                .join(Response, Response.id == ResponseDetail.response_id)
                .filter(scope)
                .all()
            )
        ]

        stats: Dict[str, Any] = {
            "total_participants": int(total),
            "completion_rate": completion_rate(int(total), int(completed)),
            "average_score": average_score(answers),
        }
        if content_id is not None:
            stats["content_id"] = str(content_id)
        return stats

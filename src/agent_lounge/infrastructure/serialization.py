"""Session snapshot serialization.

Converts an ``AgentSession`` to a plain, JSON-serializable dict and back.
The format is opaque to callers: it exists so a host can park a session and
rebuild it later, not as a storage contract.

Achievement predicates are code, not data, so only the unlock state
(``unlocked`` / ``unlocked_date``) is written; on restore it is applied to
the catalogue of the new session by achievement id.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

import yaml

from agent_lounge.domain.entities import (
    Course,
    DailyChallenge,
    FeedItem,
    Lead,
    Notification,
    Quote,
    Reminder,
    Task,
    TrainingModule,
)
from agent_lounge.domain.enums import (
    ActivityType,
    ChallengeType,
    Disposition,
    FeedItemType,
    LeadStatus,
    NotificationType,
    Period,
    Priority,
    Product,
    QuoteStatus,
    TaskCategory,
)
from agent_lounge.domain.values import ActivityLog, AgentProfile, StatusChange

if TYPE_CHECKING:
    from agent_lounge.services.session import AgentSession

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


# =========================================================================== #
#  Generic helpers                                                             #
# =========================================================================== #

def _enum_val(v: Any) -> Any:
    """Return the ``.value`` if *v* is an enum member, else *v* unchanged."""
    if hasattr(v, "value"):
        return v.value
    return v


def _iso(v: date | datetime | None) -> str | None:
    return v.isoformat() if v is not None else None


def _parse_date(v: str | None) -> date | None:
    return date.fromisoformat(v) if v else None


def _parse_datetime(v: str | None) -> datetime | None:
    return datetime.fromisoformat(v) if v else None


# =========================================================================== #
#  Leads                                                                       #
# =========================================================================== #

def activity_log_to_dict(log: ActivityLog) -> dict[str, Any]:
    return {
        "id": log.id,
        "type": _enum_val(log.type),
        "notes": log.notes,
        "timestamp": _iso(log.timestamp),
        "disposition": _enum_val(log.disposition),
        "agent_id": log.agent_id,
    }


def activity_log_from_dict(data: dict[str, Any]) -> ActivityLog:
    disposition = data.get("disposition")
    return ActivityLog(
        id=str(data["id"]),
        type=ActivityType(data["type"]),
        notes=str(data.get("notes", "")),
        timestamp=_parse_datetime(data["timestamp"]),
        disposition=Disposition(disposition) if disposition else None,
        agent_id=str(data.get("agent_id", "")),
    )


def lead_to_dict(lead: Lead) -> dict[str, Any]:
    return {
        "id": lead.id,
        "name": lead.name,
        "email": lead.email,
        "phone": lead.phone,
        "state": lead.state,
        "product": lead.product,
        "source": lead.source,
        "assigned_to": lead.assigned_to,
        "created_at": _iso(lead.created_at),
        "last_contact_date": _iso(lead.last_contact_date),
        "status": _enum_val(lead.status),
        "tags": sorted(lead.tags),
        "notes": [activity_log_to_dict(n) for n in lead.notes],
        "reminders": [
            {
                "id": r.id,
                "date": _iso(r.date),
                "time": r.time,
                "message": r.message,
                "completed": r.completed,
            }
            for r in lead.reminders
        ],
        "status_history": [
            {
                "from": _enum_val(s.from_status),
                "to": _enum_val(s.to_status),
                "timestamp": _iso(s.timestamp),
            }
            for s in lead.status_history
        ],
    }


def lead_from_dict(data: dict[str, Any]) -> Lead:
    return Lead(
        id=str(data["id"]),
        name=str(data["name"]),
        email=str(data.get("email", "")),
        phone=str(data.get("phone", "")),
        state=str(data.get("state", "")),
        product=str(data.get("product", "")),
        source=str(data.get("source", "")),
        assigned_to=str(data.get("assigned_to", "")),
        created_at=_parse_datetime(data["created_at"]),
        last_contact_date=_parse_date(data.get("last_contact_date")),
        status=LeadStatus(data.get("status", "new")),
        tags=set(data.get("tags", [])),
        notes=[activity_log_from_dict(n) for n in data.get("notes", [])],
        reminders=[
            Reminder(
                id=str(r["id"]),
                date=_parse_date(r["date"]),
                time=str(r.get("time", "")),
                message=str(r.get("message", "")),
                completed=bool(r.get("completed", False)),
            )
            for r in data.get("reminders", [])
        ],
        status_history=[
            StatusChange(
                from_status=LeadStatus(s["from"]),
                to_status=LeadStatus(s["to"]),
                timestamp=_parse_datetime(s["timestamp"]),
            )
            for s in data.get("status_history", [])
        ],
    )


# =========================================================================== #
#  Tasks, notifications, feed                                                  #
# =========================================================================== #

def task_to_dict(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "category": _enum_val(task.category),
        "due_date": task.due_date,
        "performance_impact": task.performance_impact,
        "completed": task.completed,
        "assigned_to": task.assigned_to,
        "priority": _enum_val(task.priority),
    }


def task_from_dict(data: dict[str, Any]) -> Task:
    return Task(
        id=str(data["id"]),
        title=str(data["title"]),
        description=str(data.get("description", "")),
        category=TaskCategory(data.get("category", "admin")),
        due_date=str(data.get("due_date", "")),
        performance_impact=int(data.get("performance_impact", 0)),
        completed=bool(data.get("completed", False)),
        assigned_to=str(data.get("assigned_to", "")),
        priority=Priority(data.get("priority", "medium")),
    )


def notification_to_dict(n: Notification) -> dict[str, Any]:
    return {
        "id": n.id,
        "type": _enum_val(n.type),
        "title": n.title,
        "description": n.description,
        "timestamp": _iso(n.timestamp),
        "read": n.read,
    }


def notification_from_dict(data: dict[str, Any]) -> Notification:
    return Notification(
        id=str(data["id"]),
        type=NotificationType(data["type"]),
        title=str(data["title"]),
        description=str(data.get("description", "")),
        timestamp=_parse_datetime(data["timestamp"]),
        read=bool(data.get("read", False)),
    )


def feed_item_to_dict(item: FeedItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "type": _enum_val(item.type),
        "agent_name": item.agent_name,
        "message": item.message,
        "timestamp": _iso(item.timestamp),
        "highlight": item.highlight,
    }


def feed_item_from_dict(data: dict[str, Any]) -> FeedItem:
    return FeedItem(
        id=str(data["id"]),
        type=FeedItemType(data["type"]),
        agent_name=str(data["agent_name"]),
        message=str(data["message"]),
        timestamp=_parse_datetime(data["timestamp"]),
        highlight=bool(data.get("highlight", False)),
    )


# =========================================================================== #
#  Quotes, challenges, courses                                                 #
# =========================================================================== #

def quote_to_dict(q: Quote) -> dict[str, Any]:
    return {
        "id": q.id,
        "client_name": q.client_name,
        "product": _enum_val(q.product),
        "coverage_amount": q.coverage_amount,
        "monthly_premium": q.monthly_premium,
        "created_date": _iso(q.created_date),
        "expires_date": _iso(q.expires_date),
        "client_email": q.client_email,
        "client_phone": q.client_phone,
        "lead_id": q.lead_id,
        "term": q.term,
        "status": _enum_val(q.status),
        "agent_id": q.agent_id,
        "notes": q.notes,
    }


def quote_from_dict(data: dict[str, Any]) -> Quote:
    term = data.get("term")
    return Quote(
        id=str(data["id"]),
        client_name=str(data["client_name"]),
        product=Product(data["product"]),
        coverage_amount=float(data["coverage_amount"]),
        monthly_premium=float(data["monthly_premium"]),
        created_date=_parse_date(data["created_date"]),
        expires_date=_parse_date(data["expires_date"]),
        client_email=str(data.get("client_email", "")),
        client_phone=str(data.get("client_phone", "")),
        lead_id=data.get("lead_id"),
        term=int(term) if term is not None else None,
        status=QuoteStatus(data.get("status", "draft")),
        agent_id=str(data.get("agent_id", "")),
        notes=str(data.get("notes", "")),
    )


def challenge_to_dict(c: DailyChallenge) -> dict[str, Any]:
    return {
        "id": c.id,
        "title": c.title,
        "type": _enum_val(c.type),
        "target": c.target,
        "xp_reward": c.xp_reward,
        "description": c.description,
        "current": c.current,
        "bonus_xp": c.bonus_xp,
        "completed": c.completed,
    }


def challenge_from_dict(data: dict[str, Any]) -> DailyChallenge:
    return DailyChallenge(
        id=str(data["id"]),
        title=str(data["title"]),
        type=ChallengeType(data["type"]),
        target=int(data["target"]),
        xp_reward=int(data["xp_reward"]),
        description=str(data.get("description", "")),
        current=int(data.get("current", 0)),
        bonus_xp=int(data.get("bonus_xp", 0)),
        completed=bool(data.get("completed", False)),
    )


def course_to_dict(c: Course) -> dict[str, Any]:
    return {
        "id": c.id,
        "title": c.title,
        "description": c.description,
        "category": c.category,
        "required": c.required,
        "modules": [
            {"id": m.id, "title": m.title, "duration": m.duration, "completed": m.completed}
            for m in c.modules
        ],
    }


def course_from_dict(data: dict[str, Any]) -> Course:
    return Course(
        id=str(data["id"]),
        title=str(data["title"]),
        description=str(data.get("description", "")),
        category=str(data.get("category", "product")),
        required=bool(data.get("required", False)),
        modules=[
            TrainingModule(
                id=str(m["id"]),
                title=str(m["title"]),
                duration=str(m.get("duration", "")),
                completed=bool(m.get("completed", False)),
            )
            for m in data.get("modules", [])
        ],
    )


# =========================================================================== #
#  Session                                                                     #
# =========================================================================== #

def session_to_dict(session: AgentSession) -> dict[str, Any]:
    """Serialize an ``AgentSession`` to a JSON-compatible dict."""
    perf = session.performance
    entry = session.leaderboard.get(session.profile.agent_id)
    return {
        "version": FORMAT_VERSION,
        "profile": {
            "agent_id": session.profile.agent_id,
            "name": session.profile.name,
            "email": session.profile.email,
        },
        "performance": {
            "xp": perf.xp,
            "current_streak": perf.current_streak,
            "longest_streak": perf.longest_streak,
            "last_activity_date": _iso(perf.last_activity_date),
        },
        "achievements": {
            a.id: _iso(a.unlocked_date) for a in session.gamification.achievements if a.unlocked
        },
        "leads": [lead_to_dict(lead) for lead in session.pipeline.leads],
        "tasks": [task_to_dict(t) for t in session.tasks.tasks],
        # oldest first, so restoring in order reproduces newest-first listing
        "notifications": [notification_to_dict(n) for n in reversed(session.notifications.notifications)],
        "feed": [feed_item_to_dict(i) for i in session.feed.items],
        "quotes": [quote_to_dict(q) for q in session.quotes.quotes],
        "challenges": [challenge_to_dict(c) for c in session.challenges.challenges],
        "courses": [course_to_dict(c) for c in session.courses.courses],
        "call_dates": [_iso(d) for d in session.call_dates],
        "close_dates": [_iso(d) for d in session.close_dates],
        "leaderboard": {
            "ap": {_enum_val(p): amount for p, amount in entry.ap.items()},
            "closed_deals": entry.closed_deals,
        },
    }


def restore_session(data: dict[str, Any], **session_kwargs: Any) -> AgentSession:
    """Rebuild an ``AgentSession`` from :func:`session_to_dict` output.

    Extra keyword arguments (clock, scheduler, configs, shared leaderboard,
    achievement catalogue ...) are passed to the ``AgentSession``
    constructor.
    """
    from agent_lounge.services.session import AgentSession

    version = data.get("version", FORMAT_VERSION)
    if version != FORMAT_VERSION:
        raise ValueError(f"Unsupported snapshot version {version!r}")

    p = data["profile"]
    profile = AgentProfile(agent_id=str(p["agent_id"]), name=str(p["name"]), email=str(p.get("email", "")))
    session = AgentSession(
        profile,
        courses=[course_from_dict(c) for c in data.get("courses", [])],
        challenges=[challenge_from_dict(c) for c in data.get("challenges", [])],
        **session_kwargs,
    )

    perf_data = data.get("performance", {})
    perf = session.performance
    perf.xp = int(perf_data.get("xp", 0))
    perf.current_streak = int(perf_data.get("current_streak", 0))
    perf.longest_streak = int(perf_data.get("longest_streak", 0))
    perf.last_activity_date = _parse_date(perf_data.get("last_activity_date"))

    catalogue = {a.id: a for a in session.gamification.achievements}
    for achievement_id, unlocked_date in data.get("achievements", {}).items():
        achievement = catalogue.get(achievement_id)
        if achievement is None:
            logger.warning("Skipping unknown achievement %r in snapshot", achievement_id)
            continue
        achievement.unlocked = True
        achievement.unlocked_date = _parse_datetime(unlocked_date)

    for lead in data.get("leads", []):
        session.pipeline.restore(lead_from_dict(lead))
    for task in data.get("tasks", []):
        session.tasks.restore(task_from_dict(task))
    for notification in data.get("notifications", []):
        session.notifications.restore(notification_from_dict(notification))
    for quote in data.get("quotes", []):
        session.quotes.restore(quote_from_dict(quote))
    session.feed.restore([feed_item_from_dict(i) for i in data.get("feed", [])])
    session.restore_counters(
        [_parse_date(d) for d in data.get("call_dates", [])],
        [_parse_date(d) for d in data.get("close_dates", [])],
    )

    board = data.get("leaderboard", {})
    session.leaderboard.register(
        profile.agent_id,
        profile.name,
        ap={Period(k): float(v) for k, v in board.get("ap", {}).items()},
        closed_deals=int(board.get("closed_deals", 0)),
    )
    logger.info("Restored session for %s", profile.agent_id)
    return session


# =========================================================================== #
#  JSON / YAML                                                                 #
# =========================================================================== #

def to_json(session: AgentSession, *, indent: int | None = 2) -> str:
    return json.dumps(session_to_dict(session), indent=indent)


def from_json(json_str: str, **session_kwargs: Any) -> AgentSession:
    return restore_session(json.loads(json_str), **session_kwargs)


def to_yaml(session: AgentSession) -> str:
    return yaml.safe_dump(session_to_dict(session), default_flow_style=False, sort_keys=False)


def from_yaml(yaml_str: str, **session_kwargs: Any) -> AgentSession:
    data = yaml.safe_load(yaml_str)
    if not isinstance(data, dict):
        raise ValueError("Snapshot YAML must contain a mapping")
    return restore_session(data, **session_kwargs)

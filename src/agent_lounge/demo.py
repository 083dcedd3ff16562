"""Demo data set.

Seeds a session with the sample agent "Alex Johnson" (``agent-1``), four
peer agents on the leaderboard, a small pipeline, tasks, courses, daily
challenges and the canned events used by the simulated activity feed.
Seeding writes state directly and awards no XP.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from agent_lounge.domain.entities import Course, DailyChallenge, TrainingModule
from agent_lounge.domain.enums import (
    ActivityType,
    ChallengeType,
    Disposition,
    FeedItemType,
    LeadStatus,
    NotificationType,
    Period,
    Priority,
    TaskCategory,
)
from agent_lounge.domain.values import AgentProfile
from agent_lounge.services.activity_feed import FeedTemplate
from agent_lounge.services.leaderboard import LeaderboardAggregator
from agent_lounge.services.session import AgentSession

DEMO_PROFILE = AgentProfile(agent_id="agent-1", name="Alex Johnson", email="agent@goldcoastfnl.com")

# (agent_id, name, level, streak, closed_deals, {period: AP})
DEMO_PEERS: tuple[tuple[str, str, int, int, int, dict[Period, float]], ...] = (
    ("agent-top-1", "Sarah Mitchell", 7, 15, 8,
     {Period.DAILY: 4500, Period.WEEKLY: 28500, Period.MONTHLY: 112000, Period.YEARLY: 1250000}),
    ("agent-top-2", "Marcus Chen", 6, 12, 6,
     {Period.DAILY: 3200, Period.WEEKLY: 22400, Period.MONTHLY: 89600, Period.YEARLY: 980000}),
    ("agent-top-4", "Emily Davis", 4, 3, 2,
     {Period.DAILY: 1200, Period.WEEKLY: 8400, Period.MONTHLY: 33600, Period.YEARLY: 420000}),
    ("agent-top-5", "Jordan Taylor", 3, 7, 1,
     {Period.DAILY: 900, Period.WEEKLY: 6300, Period.MONTHLY: 25200, Period.YEARLY: 310000}),
)

DEMO_AGENT_AP = {Period.DAILY: 1800, Period.WEEKLY: 12600, Period.MONTHLY: 50400, Period.YEARLY: 580000}

DEMO_FEED_TEMPLATES: tuple[FeedTemplate, ...] = (
    FeedTemplate(FeedItemType.DEAL, "Sarah Mitchell", "closed a $750K Whole Life policy!", highlight=True),
    FeedTemplate(FeedItemType.ACHIEVEMENT, "Marcus Chen", 'unlocked "Call Champion" badge'),
    FeedTemplate(FeedItemType.STREAK, "Emily Davis", "reached a 10-day streak!"),
    FeedTemplate(FeedItemType.LEAD, "Alex Johnson", "moved Sarah Williams to Proposal stage"),
    FeedTemplate(FeedItemType.TRAINING, "Jordan Taylor", 'completed "Sales Fundamentals" course'),
    FeedTemplate(FeedItemType.CALL, "Marcus Chen", "logged a 25min call"),
    FeedTemplate(FeedItemType.EARNING, "Sarah Mitchell", "earned a $1,200 commission"),
)

# (name, email, phone, state, product, source, status, (activity, disposition, notes) | None)
DEMO_LEADS: tuple[tuple[Any, ...], ...] = (
    ("Michael Chen", "mchen@email.com", "(630) 555-1234", "Illinois", "Term Life", "Website",
     LeadStatus.QUALIFIED,
     (ActivityType.CALL, Disposition.INTERESTED, "Interested in 20-year term. Has 2 kids.")),
    ("Sarah Williams", "swilliams@email.com", "(312) 555-5678", "Illinois", "Whole Life", "Referral",
     LeadStatus.PROPOSAL,
     (ActivityType.MEETING, Disposition.APPOINTMENT_SET, "Met via Zoom. Sending proposal.")),
    ("James Rodriguez", "jrod@email.com", "(219) 555-9999", "Indiana", "Term Life", "Website",
     LeadStatus.NEW, None),
    ("Emily Thompson", "ethompson@email.com", "(847) 555-3333", "Illinois", "Term Life", "Facebook Ad",
     LeadStatus.CONTACTED,
     (ActivityType.CALL, Disposition.CALLBACK, "Asked for a callback next week.")),
    ("David Park", "dpark@email.com", "(312) 555-7777", "Illinois", "IUL", "Referral",
     LeadStatus.QUALIFIED, None),
    ("Lisa Martinez", "lmartinez@email.com", "(630) 555-4444", "Illinois", "Whole Life", "Website",
     LeadStatus.CLOSED, None),
)

# (title, description, category, due_date, performance_impact, priority, completed)
DEMO_TASKS: tuple[tuple[Any, ...], ...] = (
    ("Make 10 outbound calls", "Complete daily calling quota", TaskCategory.CALLS, "Today", 10, Priority.HIGH, False),
    ("Follow up with 3 leads", "Contact leads from yesterday", TaskCategory.FOLLOWUP, "Today", 5, Priority.HIGH, False),
    ("Complete Term Life Basics Module 3", "Continue training certification", TaskCategory.TRAINING,
     "Tomorrow", 8, Priority.MEDIUM, False),
    ("Update CRM notes", "Log all activities from today", TaskCategory.ADMIN, "Today", 3, Priority.LOW, True),
)

DEMO_UNLOCKED = ("first-steps", "closer", "streak-starter")


def demo_courses() -> list[Course]:
    def mods(*rows: tuple[str, str, str, bool]) -> list[TrainingModule]:
        return [TrainingModule(id=i, title=t, duration=d, completed=c) for i, t, d, c in rows]

    return [
        Course("course-1", "Term Life Basics", "Foundation course for selling term life insurance",
               category="product", required=True, modules=mods(
                   ("mod-1", "What is Term Life?", "15 min", True),
                   ("mod-2", "Policy Riders", "20 min", True),
                   ("mod-3", "Pricing & Quotes", "25 min", True),
                   ("mod-4", "Underwriting Basics", "30 min", False),
               )),
        Course("course-2", "Sales Fundamentals", "Core sales techniques for insurance professionals",
               category="sales", required=True, modules=mods(
                   ("mod-5", "Building Rapport", "20 min", False),
                   ("mod-6", "Needs Analysis", "25 min", False),
                   ("mod-7", "Presentation Skills", "30 min", False),
               )),
        Course("course-3", "IUL Advanced Strategies", "Advanced indexed universal life techniques",
               category="product", modules=mods(
                   ("mod-8", "IUL Overview", "20 min", False),
                   ("mod-9", "Illustration Walkthrough", "45 min", False),
                   ("mod-10", "Client Presentation", "35 min", False),
               )),
        Course("course-4", "Final Expense Mastery", "Complete training for final expense sales",
               category="product", modules=mods(
                   ("mod-11", "Understanding Final Expense", "15 min", False),
                   ("mod-12", "Target Market & Leads", "20 min", False),
                   ("mod-13", "Simplified Issue Products", "25 min", False),
                   ("mod-14", "Closing Techniques", "30 min", False),
               )),
        Course("course-5", "Mortgage Protection Training", "Protect families' homes with the right coverage",
               category="product", modules=mods(
                   ("mod-15", "Mortgage Protection Basics", "20 min", False),
                   ("mod-16", "Working Mortgage Leads", "25 min", False),
                   ("mod-17", "Return of Premium Options", "20 min", False),
               )),
    ]


def demo_challenges() -> list[DailyChallenge]:
    return [
        DailyChallenge("dc-1", "Call Crusher", ChallengeType.CALLS, target=10, xp_reward=50,
                       description="Make 10 outbound calls today", current=7),
        DailyChallenge("dc-2", "Lead Machine", ChallengeType.LEADS, target=2, xp_reward=30,
                       description="Add 2 new leads to your pipeline", current=1),
        DailyChallenge("dc-3", "Knowledge Seeker", ChallengeType.TRAINING, target=1, xp_reward=25,
                       description="Complete 1 training module", bonus_xp=10),
    ]


def demo_leaderboard() -> LeaderboardAggregator:
    board = LeaderboardAggregator()
    for agent_id, name, level, streak, closed, ap in DEMO_PEERS[:2]:
        board.register(agent_id, name, ap=ap, level=level, streak=streak, closed_deals=closed)
    # the demo agent ranks third, so reserve its slot before the remaining peers
    board.register(DEMO_PROFILE.agent_id, DEMO_PROFILE.name, ap=DEMO_AGENT_AP, closed_deals=2)
    for agent_id, name, level, streak, closed, ap in DEMO_PEERS[2:]:
        board.register(agent_id, name, ap=ap, level=level, streak=streak, closed_deals=closed)
    return board


def build_demo_session(
    clock: Callable[[], datetime] = datetime.now,
    **session_kwargs: Any,
) -> AgentSession:
    """Return an ``AgentSession`` for the demo agent, seeded with sample data.

    Keyword arguments are forwarded to ``AgentSession`` (scheduler, configs,
    preferences ...); a ``leaderboard`` argument replaces the demo peers.
    """
    session_kwargs.setdefault("leaderboard", demo_leaderboard())
    session = AgentSession(
        DEMO_PROFILE,
        clock=clock,
        courses=demo_courses(),
        challenges=demo_challenges(),
        feed_templates=DEMO_FEED_TEMPLATES,
        **session_kwargs,
    )
    today = clock().date()

    perf = session.performance
    perf.xp = 2450
    perf.current_streak = 5
    perf.longest_streak = 12
    perf.last_activity_date = today - timedelta(days=1)
    for achievement_id in DEMO_UNLOCKED:
        achievement = session.gamification.get_achievement(achievement_id)
        achievement.unlocked = True
        achievement.unlocked_date = clock() - timedelta(days=30)

    for name, email, phone, state, product, source, status, activity in DEMO_LEADS:
        lead = session.pipeline.create_lead(
            name=name, email=email, phone=phone, state=state, product=product, source=source
        )
        if activity is not None:
            activity_type, disposition, notes = activity
            session.pipeline.add_activity(lead.id, activity_type, notes, disposition)
        session.pipeline.update_status(lead.id, status)

    for title, description, category, due, impact, priority, completed in DEMO_TASKS:
        task = session.tasks.add_task(
            title=title,
            description=description,
            category=category,
            due_date=due,
            performance_impact=impact,
            priority=priority,
        )
        task.completed = completed

    session.restore_counters(
        call_dates=[today] * 47,
        close_dates=[today - timedelta(days=2), today - timedelta(days=9)],
    )

    session.notifications.notify(
        NotificationType.EARNING,
        "Commission Paid",
        "Your $850 commission for POL-2025-1234 has been deposited",
    )
    session.notifications.notify(
        NotificationType.REMINDER,
        "Follow-up Reminder",
        "Call Michael Chen today - interested in 20-year term",
    )

    for template in reversed(DEMO_FEED_TEMPLATES[:5]):
        session.feed.post(template.type, template.agent_name, template.message, template.highlight)
    return session

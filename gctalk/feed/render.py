"""Plain-text presentation of the feed.

Card layout follows the web view: category badge and title, author
initials with name and class, body, relative timestamp, comment count,
and optionally the comment thread. Timestamps read like "há 5 minutos".
"""

import math
from datetime import datetime, timezone

import click

from gctalk.feed import messages
from gctalk.feed.schemas import Category, Comment, Feedback

MINUTES_IN_DAY = 1440
MINUTES_IN_ALMOST_TWO_DAYS = 2520
MINUTES_IN_MONTH = 43200
MINUTES_IN_TWO_MONTHS = 86400

# (singular, plural) phrasing per distance bucket
_DISTANCE_PHRASES: dict[str, tuple[str, str]] = {
    "less_than_minutes": ("menos de um minuto", "menos de {count} minutos"),
    "minutes": ("1 minuto", "{count} minutos"),
    "about_hours": ("cerca de 1 hora", "cerca de {count} horas"),
    "days": ("1 dia", "{count} dias"),
    "about_months": ("cerca de 1 mês", "cerca de {count} meses"),
    "months": ("1 mês", "{count} meses"),
    "about_years": ("cerca de 1 ano", "cerca de {count} anos"),
    "over_years": ("mais de 1 ano", "mais de {count} anos"),
    "almost_years": ("quase 1 ano", "quase {count} anos"),
}


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _phrase(bucket: str, count: int) -> str:
    one, other = _DISTANCE_PHRASES[bucket]
    return one if count == 1 else other.format(count=count)


def _calendar_months(earlier: datetime, later: datetime) -> int:
    months = (later.year - earlier.year) * 12 + (later.month - earlier.month)
    # A month only counts once the day and time have come round again
    if months > 0 and (later.day, later.time()) < (earlier.day, earlier.time()):
        months -= 1
    return months


def distance_in_words(earlier: datetime, later: datetime) -> str:
    """Approximate distance between two moments, in Portuguese."""
    minutes = _round_half_up((later - earlier).total_seconds() / 60)

    if minutes < 2:
        return _phrase("less_than_minutes", 1) if minutes == 0 else _phrase("minutes", minutes)
    if minutes < 45:
        return _phrase("minutes", minutes)
    if minutes < 90:
        return _phrase("about_hours", 1)
    if minutes < MINUTES_IN_DAY:
        return _phrase("about_hours", _round_half_up(minutes / 60))
    if minutes < MINUTES_IN_ALMOST_TWO_DAYS:
        return _phrase("days", 1)
    if minutes < MINUTES_IN_MONTH:
        return _phrase("days", _round_half_up(minutes / MINUTES_IN_DAY))
    if minutes < MINUTES_IN_TWO_MONTHS:
        return _phrase("about_months", _round_half_up(minutes / MINUTES_IN_MONTH))

    months = _calendar_months(earlier, later)
    if months < 12:
        return _phrase("months", _round_half_up(minutes / MINUTES_IN_MONTH))

    years, remainder = divmod(months, 12)
    if remainder < 3:
        return _phrase("about_years", years)
    if remainder < 9:
        return _phrase("over_years", years)
    return _phrase("almost_years", years + 1)


def relative_time(moment: datetime, now: datetime | None = None) -> str:
    """
    Distance from ``moment`` to ``now`` with a direction suffix.

    Examples: "há menos de um minuto", "há cerca de 3 horas", "em 2 dias".
    """
    now = now or datetime.now(timezone.utc)
    if moment > now:
        return f"em {distance_in_words(now, moment)}"
    return f"há {distance_in_words(moment, now)}"


def initials(name: str) -> str:
    """Up to two upper-cased initials of a display name."""
    return "".join(part[0] for part in name.split(" ") if part).upper()[:2]


def comment_count_label(count: int) -> str:
    return f"{count} comentário" if count == 1 else f"{count} comentários"


def category_badge(value: str) -> tuple[str, str | None]:
    """
    Label and color for a stored category value.

    Unknown values render as an empty badge instead of failing.
    """
    category = Category.parse(value)
    if category is None:
        return "", None
    return category.label, category.color


def _author_line(name: str, class_name: str, when: str) -> str:
    parts = [p for p in (name, class_name, when) if p]
    return f"{initials(name) or '?':>2}  " + " · ".join(parts)


def render_comment(comment: Comment, now: datetime | None = None) -> str:
    author = comment.author
    header = _author_line(author.full_name, author.class_name, relative_time(comment.created_at, now))
    return f"    {header}\n        {comment.content}"


def render_feedback(
    feedback: Feedback,
    now: datetime | None = None,
    show_comments: bool = False,
    styled: bool = False,
) -> str:
    """Render one feedback card as text."""
    label, color = category_badge(feedback.category)
    badge = f"[{label}]"
    if styled and color:
        badge = click.style(badge, fg=color, bold=True)
    title = click.style(feedback.title, bold=True) if styled else feedback.title

    author = feedback.author
    lines = [
        f"{badge} {title}",
        _author_line(author.full_name, author.class_name, relative_time(feedback.created_at, now)),
        feedback.content,
        f"{comment_count_label(len(feedback.comments))} · id {feedback.id}",
    ]
    if show_comments:
        lines.extend(render_comment(c, now) for c in feedback.comments)
    return "\n".join(lines)


def render_feed(
    feedbacks: list[Feedback],
    now: datetime | None = None,
    show_comments: bool = False,
    styled: bool = False,
) -> str:
    """Render the whole feed, or the empty-state message."""
    header = f"{messages.FEED_TITLE}\n{messages.FEED_SUBTITLE}"
    if not feedbacks:
        return f"{header}\n\n{messages.EMPTY_FEED_TITLE}\n{messages.EMPTY_FEED_BODY}"

    now = now or datetime.now(timezone.utc)
    cards = [render_feedback(f, now, show_comments, styled) for f in feedbacks]
    return header + "\n\n" + "\n\n".join(cards)

"""Insight panel presentation: which comments to show and how to copy them."""
from .selection import PANEL_MIN_CATEGORIES, filled_categories, should_show_insights
from .synergy import compute_synergy

STANDARD_MODE = "standard"
PRO_MODE = "pro"
INSIGHT_MODES = (STANDARD_MODE, PRO_MODE)
STANDARD_BASIC_LIMIT = 5


def split_comments(result, mode=STANDARD_MODE):
    """Return ``(basic, advanced)`` comment texts.

    Standard mode trims the basic list to the first five; pro mode shows all.
    """
    basic = [c.text for c in result.comments if not c.advanced]
    advanced = [c.text for c in result.comments if c.advanced]
    if mode != PRO_MODE:
        basic = basic[:STANDARD_BASIC_LIMIT]
    return basic, advanced


def format_insight_summary(result, include_advanced=False, mode=STANDARD_MODE):
    basic, advanced = split_comments(result, mode)
    text = (
        f"Kevin's Insight - {result.profile}\n"
        f"Synergy Grade: {result.grade} ({result.score}/100)\n\n"
        + "\n\n".join(basic)
    )
    if include_advanced and advanced:
        text += "\n\nAdvanced Analysis:\n" + "\n\n".join(advanced)
    return text


def insight_panel(selection, mode=STANDARD_MODE, include_advanced=False,
                  policy=None, base_watts=150.0):
    """Everything the insight panel renders, or None while it stays hidden."""
    if not should_show_insights(selection, PANEL_MIN_CATEGORIES):
        return None
    result = compute_synergy(selection, policy, base_watts)
    if not result.comments:
        return None
    basic, advanced = split_comments(result, mode)
    data = result.to_dict()
    data.update(
        {
            "mode": mode,
            "filled_categories": filled_categories(selection),
            "basic": basic,
            "advanced": advanced if include_advanced else [],
            "advanced_count": len(advanced),
        }
    )
    return data

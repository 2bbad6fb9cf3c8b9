from django import template

from trending.countries import lookup
from trending.models import ChartCategory

register = template.Library()

# Filters render display strings from a TrendingSummary and its parts.
# They are plain functions as well, and return "" for input they cannot read.
_MALFORMED = (AttributeError, TypeError, IndexError, KeyError, ValueError)


@register.filter
def chart_category_label(category):
    """'top-free' → 'Top Free'. Unknown categories come back unchanged."""
    if category is None:
        return ""
    try:
        return str(ChartCategory(category).label)
    except (TypeError, ValueError):
        return str(category)


@register.filter
def country_count_label(count):
    """Return 'country' or 'countries'. Usage: {{ n }} {{ n|country_count_label }}"""
    try:
        return "country" if int(count) == 1 else "countries"
    except (TypeError, ValueError):
        return ""


@register.filter
def country_label(country):
    """Flag + name for a Country or a 2-letter code."""
    if not country:
        return ""
    code = getattr(country, "code", country)
    info = lookup(code)
    return f"{info.flag} {info.name}"


@register.filter
def trending_headline(summary):
    """
    One-line headline for a scan.

    Usage: {{ summary|trending_headline }}  →  "trending in 3 countries (of 20 scanned)"
    """
    try:
        if not summary.has_trending:
            return ""
        count = int(summary.total_trending_countries)
        scanned = int(summary.countries_scanned)
    except _MALFORMED:
        return ""
    return f"trending in {count} {country_count_label(count)} (of {scanned} scanned)"


@register.filter
def trending_description(summary):
    """
    Human-readable list of where the portfolio trends.

    One country names its chart and rank, e.g.
    "Trending in Japan (Top Free #4)"; more list up to three countries
    and count the rest: "Trending in United States, India, Canada and 2 more".
    """
    try:
        if not summary.has_trending or not summary.countries:
            return ""

        total = int(summary.total_trending_countries)
        if total == 1:
            country = summary.countries[0]
            return (
                f"Trending in {country.country.name} "
                f"({chart_category_label(country.category)} #{country.best_rank})"
            )

        names = ", ".join(c.country.name for c in summary.countries[:3])
        remaining = total - 3
    except _MALFORMED:
        return ""

    if remaining > 0:
        return f"Trending in {names} and {remaining} more"
    return f"Trending in {names}"


@register.filter
def trending_badge(app_trending):
    """'#<best rank>' for an app that charts anywhere, else ''."""
    try:
        best_rank = app_trending.best_rank
    except _MALFORMED:
        return ""
    return f"#{best_rank}" if best_rank else ""

import logging

from django.http import JsonResponse
from django.views.decorators.http import require_GET

from .forms import TrendingQueryForm
from .scheduler import get_status
from .services import TrendingService
from .templatetags.trending_tags import trending_description, trending_headline

logger = logging.getLogger(__name__)


@require_GET
def trending_view(request):
    """
    Trending summary for a set of apps.

    GET /trending/?apps=123,456&breadth=major
    Returns the summary as JSON together with its display strings.
    """
    form = TrendingQueryForm(request.GET)
    if not form.is_valid():
        errors = "; ".join(e for field_errors in form.errors.values() for e in field_errors)
        return JsonResponse({"error": errors or "Invalid query."}, status=400)

    app_ids = form.cleaned_data["apps"]
    breadth = form.cleaned_data["breadth"]
    logger.info(f"Trending request: {len(app_ids)} apps (scan: {breadth})")

    summary = TrendingService().build_summary(app_ids, breadth)

    response_data = summary.to_dict()
    response_data["headline"] = trending_headline(summary)
    response_data["description"] = trending_description(summary)
    return JsonResponse(response_data)


@require_GET
def prefetch_status_view(request):
    """Progress of the background chart prefetch."""
    return JsonResponse(get_status())

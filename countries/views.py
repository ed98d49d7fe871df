import logging

from django.apps import apps
from django.db import DatabaseError
from django.http import FileResponse
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from .exceptions import NotFound, ValidationFailed
from .serializers import ApiStatusSerializer, CountryQuerySerializer, CountrySerializer
from .services import RefreshService
from .utils import format_timestamp, get_now

logger = logging.getLogger(__name__)


def _app():
    return apps.get_app_config("countries")


@api_view(['GET'])
def home(request):
    """GET / -> API information."""
    return Response({
        "name": "Country & Currency Data Caching API",
        "version": "1.0.0",
        "description": "Cached country and currency data with calculated GDP estimates",
        "endpoints": {
            "POST /countries/refresh": "Refresh country data from external APIs",
            "GET /countries": "Get all countries (filter by region, currency; sort=gdp_desc)",
            "GET /countries/{name}": "Get a specific country by name",
            "DELETE /countries/{name}": "Delete a country by name",
            "GET /status": "Get API status and metadata",
            "GET /countries/image": "Get summary image",
            "GET /health": "Health check endpoint",
        },
        "status": "operational",
        "timestamp": format_timestamp(get_now()),
    })


@api_view(['POST'])
def refresh_countries(request):
    """
    POST /countries/refresh
    Fetch countries and exchange rates, then update or create cached data.
    503 when a source is unavailable, 500 when the batch had to be rolled back.
    """
    app = _app()
    service = RefreshService(app.store, app.gateway, app.renderer, rng=app.rng)
    return Response(service.refresh(), status=status.HTTP_200_OK)


@api_view(['GET'])
def list_countries(request):
    """
    GET /countries
    Filters: ?region=<exact>, ?currency=<code, any case>
    Sorting: ?sort=gdp_desc (default is name ascending); anything else is a 400.
    """
    query = CountryQuerySerializer(data=request.query_params)
    if not query.is_valid():
        raise ValidationFailed(query.errors)

    params = query.validated_data
    qs = _app().store.all(
        region=params.get("region") or None,
        currency=params.get("currency") or None,
        sort=params.get("sort"),
    )
    return Response(CountrySerializer(qs, many=True).data)


@api_view(['GET', 'DELETE'])
def country_detail(request, name):
    """
    GET /countries/:name  -> 404 JSON if not found
    DELETE /countries/:name -> delete, 200 or 404
    """
    store = _app().store

    if request.method == 'GET':
        country = store.find_by_name(name)
        if country is None:
            raise NotFound(f"Country '{name}' not found")
        return Response(CountrySerializer(country).data)

    store.delete_by_name(name)
    return Response({"message": f"Country '{name}' deleted successfully"})


@api_view(['GET'])
def get_status(request):
    """GET /status -> { total_countries, last_refreshed_at }"""
    current = _app().store.get_api_status() or {"total_countries": 0, "last_refreshed_at": None}
    return Response(ApiStatusSerializer(current).data)


@api_view(['GET'])
def get_summary_image(request):
    """
    GET /countries/image
    Serve the cached summary image; 404 until a refresh has produced one.
    """
    path = _app().renderer.get_summary_image_path()
    if path is None:
        return Response(
            {
                "error": "Image not found",
                "message": "Summary image has not been generated yet. Please run POST /countries/refresh first.",
            },
            status=status.HTTP_404_NOT_FOUND,
        )
    response = FileResponse(open(path, 'rb'), content_type='image/png')
    response["Cache-Control"] = "public, max-age=3600"
    return response


@api_view(['GET'])
def health_check(request):
    """GET /health -> database and cache directory checks; 503 if either fails."""
    app = _app()

    try:
        app.store.ping()
        db_status = "healthy"
    except DatabaseError:
        logger.exception("Database health check failed")
        db_status = "unhealthy"

    cache_status = "healthy" if app.renderer.cache_dir_writable() else "unhealthy"

    healthy = db_status == "healthy" and cache_status == "healthy"
    return Response(
        {
            "status": "healthy" if healthy else "unhealthy",
            "timestamp": format_timestamp(get_now()),
            "checks": {"database": db_status, "cache_directory": cache_status},
        },
        status=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
    )

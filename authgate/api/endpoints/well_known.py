"""Well-known files served to mobile platforms."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from authgate.config import settings

router = APIRouter(tags=["Well-known"])


def build_apple_app_site_association(app_ids: list[str]) -> dict:
    """Build the iOS universal links association document."""
    return {
        "applinks": {
            "apps": [],
            "details": [{"appID": app_id, "paths": ["*"]} for app_id in app_ids],
        },
        "webcredentials": {"apps": app_ids},
    }


@router.get("/.well-known/apple-app-site-association", include_in_schema=False)
async def apple_app_site_association() -> JSONResponse:
    """Serve the iOS universal links association file."""
    return JSONResponse(build_apple_app_site_association(settings.apple_app_ids))

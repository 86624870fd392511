# =======================================================================================
# access_request/api/routes/assets.py - Asset Listing Endpoints
# =======================================================================================
from typing import Callable, Optional
from fastapi import APIRouter, Depends, Query
from ...models.schemas import AccessRequestSettings, AssetCard, AssetListResponse
from ...services.asset_registry import describe_assets
from ..dependencies import get_settings_provider

router = APIRouter()


@router.get("/assets", response_model=AssetListResponse)
def list_assets(
    category: Optional[str] = Query(None, description="Only assets in this category"),
    settings_provider: Callable[[], AccessRequestSettings] = Depends(get_settings_provider),
):
    assets, message = describe_assets(settings_provider().asset_map, category)
    return AssetListResponse(
        assets=[
            AssetCard(
                asset_id=a.asset_id,
                display_name=a.display_name or a.asset_id,
                description=a.description,
                category=a.category,
                image_url=a.image_url,
                url=f"/api/access-request/{a.asset_id}?method=website",
            )
            for a in assets
        ],
        message=message,
    )

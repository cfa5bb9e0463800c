"""Category routes"""

from fastapi import APIRouter, Depends

from app.dependencies import get_catalog
from services.tool_catalog import ToolCatalog

router = APIRouter()


@router.get("")
async def list_categories(catalog: ToolCatalog = Depends(get_catalog)):
    """Categories with tool counts, largest first"""
    return {"categories": await catalog.category_counts()}

"""HTTP error helpers shared by the routers"""
from fastapi import HTTPException
from typing import List, Optional


def check_not_found(item, resource_name: str = "Resource", resource_id: Optional[int] = None) -> None:

    if not item:
        if resource_id:
            raise HTTPException(
                status_code=404,
                detail=f"{resource_name} with id {resource_id} not found"
            )
        raise HTTPException(status_code=404, detail=f"{resource_name} not found")


def raise_unprocessable(errors: List[str]) -> None:

    raise HTTPException(status_code=422, detail={"errors": errors})

from fastapi import APIRouter, HTTPException, Request

from controllers import history_controller

router = APIRouter(prefix="/history", tags=["history"])


@router.get("")
async def list_history_route(request: Request):
	return await history_controller.list_history(request)


@router.delete("")
async def clear_history_route(request: Request):
	return await history_controller.clear_history(request)


@router.get("/{record_id}")
async def get_history_route(request: Request, record_id: str):
	return await history_controller.get_history_item(request, record_id)


@router.get("/{record_id}/thumbnail")
async def get_thumbnail_route(request: Request, record_id: str):
	"""Return the PNG thumbnail for an image analysis."""
	try:
		return await history_controller.get_thumbnail(request, record_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{record_id}/report")
async def post_report_route(request: Request, record_id: str):
	return await history_controller.generate_report(request, record_id)

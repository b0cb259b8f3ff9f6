"""
extract.py
- Purpose: API routes for running an extraction and downloading its output files.
- Design: Keep router thin. Delegate business logic to services.
"""

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import Response

from app.api.deps import get_extraction_service
from app.schemas.extraction import ExtractionRunResponse
from app.services.extraction_service import ExtractionService
from app.validations.file_validators import check_upload_size

router = APIRouter(prefix="/api", tags=["Extraction"])


@router.post("/extract", response_model=ExtractionRunResponse)
async def extract_file(
    file: UploadFile | None = File(None),
    svc: ExtractionService = Depends(get_extraction_service),
):
    data = None
    if file is not None:
        # the multipart body is spooled to disk; refuse oversized files before loading them
        check_upload_size(file.size, max_bytes=svc.max_upload_bytes)
        data = await file.read()
    run = await svc.run(
        file_name=file.filename if file is not None else None,
        content_type=file.content_type if file is not None else None,
        data=data,
    )
    return ExtractionRunResponse.from_run(run)


@router.get("/runs/{run_id}", response_model=ExtractionRunResponse)
def get_run(run_id: str, svc: ExtractionService = Depends(get_extraction_service)):
    return ExtractionRunResponse.from_run(svc.get_run(run_id))


@router.get("/runs/{run_id}/files/{name}")
def download_file(run_id: str, name: str, svc: ExtractionService = Depends(get_extraction_service)):
    artifact = svc.get_artifact(run_id, name)
    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.name}"'},
    )


@router.delete("/runs/{run_id}", status_code=status.HTTP_204_NO_CONTENT)
def release_run(run_id: str, svc: ExtractionService = Depends(get_extraction_service)):
    """Reset: drop the run and its output files."""
    svc.release_run(run_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

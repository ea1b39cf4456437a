from fastapi import APIRouter, Request, Response, UploadFile
from fastapi.responses import PlainTextResponse, StreamingResponse
from starlette.background import BackgroundTask

from relay.features.files.schemas import BlobInfoResponse, UploadResponse
from relay.features.files.service import FilesService, media_type_for

router = APIRouter(tags=["files"])


def _service(request: Request) -> FilesService:
    cfg = request.app.state.cfg
    base_url = cfg.public_base_url or str(request.base_url)
    return FilesService(store=request.app.state.store, base_url=base_url)


def _blob_headers(handle: str, size: int, disposition: str) -> dict[str, str]:
    return {
        "Content-Length": str(size),
        "Content-Disposition": f'{disposition}; filename="{handle}"',
        "X-Content-Type-Options": "nosniff",
    }


def _stream(request: Request, handle: str, *, disposition: str, media_type: str) -> StreamingResponse:
    reader = _service(request).open(handle)
    # Headers go out before the body; a read failure past this point aborts the connection.
    # The background close covers a response dropped before the body is iterated.
    return StreamingResponse(
        reader.iter_chunks(),
        media_type=media_type,
        headers=_blob_headers(handle, reader.size, disposition),
        background=BackgroundTask(reader.close),
    )


@router.post("/upload", response_model=UploadResponse)
def upload_file(request: Request, file: UploadFile) -> UploadResponse:
    return _service(request).upload(file=file)


@router.get("/file/{handle}")
def serve_file(request: Request, handle: str) -> StreamingResponse:
    return _stream(request, handle, disposition="inline", media_type=media_type_for(handle))


@router.head("/file/{handle}")
def serve_file_head(request: Request, handle: str) -> Response:
    blob = _service(request).info(handle)
    return Response(
        media_type=media_type_for(handle),
        headers=_blob_headers(handle, blob.size, "inline"),
    )


@router.get("/download/{handle}")
def download_file(request: Request, handle: str) -> StreamingResponse:
    return _stream(request, handle, disposition="attachment", media_type="application/octet-stream")


@router.delete("/delete/{handle}", response_class=PlainTextResponse)
def delete_file(request: Request, handle: str) -> str:
    _service(request).delete(handle)
    return "File deleted successfully"


@router.get("/info/{handle}", response_model=BlobInfoResponse)
def file_info(request: Request, handle: str) -> BlobInfoResponse:
    return _service(request).info(handle)

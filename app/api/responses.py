from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel


def send_success(data=None, message: str = "Success", status_code: int = 200) -> JSONResponse:
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json")
    return JSONResponse(
        status_code=status_code,
        content={"success": True, "message": message, "data": jsonable_encoder(data)},
    )


def send_error(message: str, status_code: int = 500, error: str | None = None, **extra) -> JSONResponse:
    content = {"success": False, "message": message}
    if error:
        content["error"] = error
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)

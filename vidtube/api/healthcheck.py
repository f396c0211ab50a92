from fastapi import APIRouter

from vidtube.utils.responses import api_response

healthcheck_router = APIRouter()


@healthcheck_router.get("")
async def healthcheck():
    return api_response({"message": "OK"}, "OK")

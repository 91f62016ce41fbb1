from fastapi import APIRouter, Request

health_router = APIRouter(prefix="/health", tags=["health"])


@health_router.get("", summary="Liveness")
async def liveness():
    return {"status": "ok"}


@health_router.get("/dependencies", summary="Check Redis, Postgres and Kafka")
async def check_dependencies(request: Request):
    """
    Run every dependency check. Returns each service's status and a summary.
    """
    return await request.app.state.health_checker.run_all()

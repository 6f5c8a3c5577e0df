from datetime import datetime

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check(request: Request):
    """Verifica la salud del servicio y la conexión con MongoDB"""
    database = request.app.state.database
    mongo_connected = database is not None and database.ping()

    return {
        "service": "complejos_service",
        "status": "healthy" if mongo_connected else "unhealthy",
        "timestamp": datetime.now().isoformat(),
        "dependencies": {"mongodb": "connected" if mongo_connected else "disconnected"},
    }


@router.get("/test")
def test_route():
    return {"content": "Server is running!"}

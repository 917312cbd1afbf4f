# barberbook/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from barberbook.config import settings
from barberbook.db import init_db
from barberbook.exceptions import BarberBookError, barberbook_exception_handler
from barberbook.routers import (
    address_routes,
    ai_routes,
    appointments_routes,
    auth_routes,
    barbers_routes,
    clients_routes,
    reviews_routes,
    users_routes,
)

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database tables ready")
    yield


app = FastAPI(title="Barber Booking API", lifespan=lifespan)

app.add_exception_handler(BarberBookError, barberbook_exception_handler)

app.include_router(auth_routes.router)
app.include_router(users_routes.router)
app.include_router(appointments_routes.router)
app.include_router(reviews_routes.router)
app.include_router(ai_routes.router)
app.include_router(barbers_routes.router)
app.include_router(clients_routes.router)
app.include_router(address_routes.router)


@app.get("/health")
def health_check():
    return {"status": "ok"}

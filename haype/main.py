from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from haype.common.error_handlers import register_error_handlers
from haype.core.config import settings
from haype.core.database import SessionLocal
from haype.api.v1 import auth, user, employee, car, item, customer, invoice, payment, dashboard, backup
from haype.services.user_service import ensure_admin_user
from haype.logger_config import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    db = SessionLocal()
    try:
        ensure_admin_user(
            db,
            username=settings.ADMIN_USERNAME,
            email=settings.ADMIN_EMAIL,
            password=settings.ADMIN_PASSWORD,
        )
    except SQLAlchemyError as e:
        logger.error(f"Could not create the admin user, is the database migrated? {str(e)}")
    finally:
        db.close()
    yield


app = FastAPI(title="Haype Fleet Ledger", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Register API routers
prefix = settings.API_PREFIX
app.include_router(auth.router, prefix=f"{prefix}/auth", tags=["authentication"])
app.include_router(user.router, prefix=f"{prefix}/users", tags=["users"])
app.include_router(employee.router, prefix=f"{prefix}/employees", tags=["employees"])
app.include_router(car.router, prefix=f"{prefix}/cars", tags=["cars"])
app.include_router(item.router, prefix=f"{prefix}/items", tags=["items"])
app.include_router(customer.router, prefix=f"{prefix}/customers", tags=["customers"])
app.include_router(invoice.router, prefix=f"{prefix}/invoices", tags=["invoices"])
app.include_router(payment.router, prefix=f"{prefix}/payments", tags=["payments"])
app.include_router(dashboard.router, prefix=f"{prefix}/dashboard", tags=["dashboard"])
app.include_router(backup.router, prefix=f"{prefix}/backup", tags=["backup"])


@app.get("/")
def read_root():
    return {"message": "Welcome to the Haype Fleet Ledger APIs!"}

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from klassflow.api import auth, classrooms, sessions, signature, signature_tokens, teacher_signature
from klassflow.core.config import settings
from klassflow.core.errors import NotificationError, SignatureError

logger = logging.getLogger(__name__)

app = FastAPI(title="KlassFlow")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SignatureError)
async def signature_error_handler(request: Request, exc: SignatureError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(NotificationError)
async def notification_error_handler(request: Request, exc: NotificationError):
    logger.error("Notification failed on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Failed to send email"})


app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(signature.router, prefix="/api/signature", tags=["signature"])
app.include_router(teacher_signature.router, prefix="/api/teacher-signature", tags=["signature"])
app.include_router(signature_tokens.router, prefix="/api/signature-tokens", tags=["signature"])
app.include_router(sessions.router, prefix="/api/sessions", tags=["sessions"])
app.include_router(classrooms.router, prefix="/api/classrooms", tags=["classrooms"])

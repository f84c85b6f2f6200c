import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config

# Routers
from routers.admin import router as admin_router
from routers.marking import router as marking_router
from routers.tasks import router as tasks_router

logger = logging.getLogger("fraction-drill")
logging.basicConfig(level=logging.INFO)

app = FastAPI(title="Fraction Drill – Task API")

# Allow calls from the game front-end
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*", "x-admin-token"],
)


@app.get("/")
def health_root():
    return {"ok": True}


# Register routers
app.include_router(tasks_router)  # /topics, /tasks/{topic}
app.include_router(marking_router)  # /evaluate, /mark
app.include_router(admin_router)  # /admin/...

logger.info("Fraction drill API ready (origins: %s)", ", ".join(config.cors_origins()))

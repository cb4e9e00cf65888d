from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from parcelstore.api.routers import polygons
from parcelstore.db import check_connection, init_db
from parcelstore.errors import StorageFault
from parcelstore.log import configure_logging

configure_logging()

app = FastAPI(title="Parcel Store API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health():
    try:
        check_connection()
    except StorageFault as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return {"ok": True}


# 初回起動時にDBスキーマを作成
@app.on_event("startup")
def on_startup():
    init_db()

app.include_router(polygons.router, prefix="/polygons", tags=["polygons"])

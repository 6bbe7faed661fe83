from fastapi import FastAPI

from db import init_db, log_info
from routes import dashboard, forecast, occurrences, rules

app = FastAPI()

@app.on_event("startup")
def startup():
    init_db()
    log_info("Budget forecast service started.")

app.include_router(dashboard.router)
app.include_router(forecast.router)
app.include_router(occurrences.router)
app.include_router(rules.router)

import json
import logging

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import MissingCredentials, Settings, get_settings
from tweet import TransportFailure, UpstreamRejection, client_for

logging.basicConfig(level=get_settings().log_level, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

app = FastAPI()
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    detail = "Method not allowed" if exc.status_code == 405 else exc.detail
    return JSONResponse({"error": detail}, status_code=exc.status_code, headers=exc.headers)


@app.get("/")
def index():
    return {"status": "Twitter webhook server is running!"}


@app.get("/health")
def healthcheck():
    return {"status": "ok"}


@app.options("/api/twitter")
def preflight():
    return Response(status_code=200)


async def read_text(request: Request):
    """Return (text, context) from the JSON body, or raise a 400."""
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise HTTPException(status_code=400, detail="No text provided")
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="No text provided")
    text = data.get("text")
    if not text or not isinstance(text, str):
        raise HTTPException(status_code=400, detail="No text provided")
    context = data.get("context")
    return text, context if isinstance(context, dict) else {}


@app.post("/api/twitter")
async def tweet(request: Request, settings: Settings = Depends(get_settings)):
    text, context = await read_text(request)

    try:
        client = client_for(settings)
    except MissingCredentials as e:
        logger.error(f"❌ {e}")
        return JSONResponse(
            {"error": "Twitter credentials not configured", "required": e.required},
            status_code=500,
        )

    try:
        posted = await run_in_threadpool(client.post_tweet, text)
    except UpstreamRejection as e:
        return JSONResponse({"error": "Twitter API Error", "details": e.payload}, status_code=400)
    except TransportFailure as e:
        return JSONResponse({"error": "Internal server error", "message": str(e)}, status_code=500)
    except Exception as e:
        logger.exception(f"❌ Webhook error: {e}")
        return JSONResponse({"error": "Internal server error", "message": str(e)}, status_code=500)

    logger.info(
        f"📤 Tweet posted: id={posted.id} ticket={context.get('ticketId')} agent={context.get('agentName')}"
    )
    return {
        "success": True,
        "message": "Tweet posted successfully",
        "tweetId": posted.id,
        "tweetUrl": posted.url,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)

import logging
from typing import Any, Dict, List, Optional

from curl_cffi.requests import AsyncSession
from dotenv import load_dotenv
from fastapi import FastAPI
from pydantic import BaseModel

from replay import InteractionStep, replay_interactions

load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

PAGE_LOAD_TIMEOUT = 30


class ReplayRequest(BaseModel):
    html: str
    url: str = ""
    steps: List[InteractionStep] = []
    data_layer: Optional[List[Dict[str, Any]]] = None
    debug: bool = False


class ReplayURLRequest(BaseModel):
    url: str
    steps: List[InteractionStep] = []
    debug: bool = False


app = FastAPI()


@app.post("/replay")
async def replay(request: ReplayRequest):
    try:
        sinks = await replay_interactions(
            request.html,
            request.steps,
            url=request.url,
            data_layer=request.data_layer,
            debug=request.debug,
        )
    except Exception as e:
        logger.error(f"Replay failed for {request.url or 'inline html'}: {e}")
        return {"status_code": 500, "url": request.url, "sinks": {}, "error": str(e)}

    return {"status_code": 200, "url": request.url, "sinks": sinks}


@app.post("/replay-url")
async def replay_url(request: ReplayURLRequest):
    url = request.url

    try:
        async with AsyncSession() as session:
            resp = await session.get(url, impersonate="chrome", timeout=PAGE_LOAD_TIMEOUT)
    except Exception as e:
        logger.error(f"Error fetching {url}: {e}")
        return {"status_code": 502, "url": url, "sinks": {}, "error": str(e)}

    if resp.status_code >= 400:
        logger.warning(f"Fetching {url} returned {resp.status_code}")
        return {"status_code": 502, "url": url, "sinks": {}, "error": f"Upstream returned {resp.status_code}"}

    try:
        sinks = await replay_interactions(resp.text, request.steps, url=str(resp.url), debug=request.debug)
    except Exception as e:
        logger.error(f"Replay failed for {url}: {e}")
        return {"status_code": 500, "url": url, "sinks": {}, "error": str(e)}

    return {"status_code": 200, "url": str(resp.url), "sinks": sinks}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=9999)

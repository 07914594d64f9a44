import logging
import time
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from color_logic import PersonalColorAnalyst
from color_math import is_hex_color, rgb_to_hex
from config import Settings
from errors import (
    InvalidLandmarksError,
    RemoteConfigurationError,
    RemoteParseFailure,
    RemoteTransportFailure,
)
from hair_compositor import apply_hair_color
from hair_mask import STRATEGIES, build_hair_mask
from remote_edit import GeminiImageEditor, image_to_data_url
from season_data import get_hair_color_palette, get_recommended_hair_colors
from vision_engine import FeatureExtractor, decode_image, resize_for_analysis, sample_colors

VERSION = "1.0"

settings = Settings.from_env()

logging.basicConfig(
    filename=settings.log_file,
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)

app = FastAPI(
    title="Personal Color & Hair Simulation API",
    description="Seasonal color diagnosis and hair color simulation",
    version=VERSION
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
    max_age=3600,
)

analyst = PersonalColorAnalyst()
_extractor = None

analytics = {
    'total_analyses': 0,
    'faces_not_found': 0,
    'common_seasons': {},
    'local_simulations': 0,
    'remote_edits': 0,
    'remote_failures': 0,
}


def get_extractor():
    global _extractor
    if _extractor is None:
        _extractor = FeatureExtractor(settings.face_model_path)
    return _extractor


def error_response(status_code, message, error_type=None):
    content = {"success": False, "error": message}
    if error_type:
        content["errorType"] = error_type
    return JSONResponse(status_code=status_code, content=content)


def check_password(access_password):
    """None when the password is accepted, otherwise the error response"""
    if not settings.access_password:
        return error_response(500, "Server configuration error: ACCESS_PASSWORD not set.", "config")
    if access_password != settings.access_password:
        return error_response(401, "Invalid access password.", "credential")
    return None


async def read_upload(file):
    contents = await file.read()
    image = decode_image(contents)
    if image is None:
        raise HTTPException(
            status_code=400,
            detail="Invalid image file. Please upload a valid JPG or PNG."
        )
    return resize_for_analysis(image, settings.max_image_width)


def detect_or_400(image):
    landmarks = get_extractor().detect_landmarks(image)
    if landmarks is None:
        analytics['faces_not_found'] += 1
        raise HTTPException(
            status_code=400,
            detail="Face not found. Please try a different image with a clear front-facing face."
        )
    return landmarks


@app.get("/")
async def root():
    return {
        "service": "Personal Color & Hair Simulation API",
        "version": VERSION,
        "status": "operational",
        "endpoints": {
            "/analyze": "POST - Diagnose the personal color season of a portrait",
            "/simulate-hair": "POST - Recolor the hair region locally",
            "/api/verify-password": "POST - Check the access password",
            "/api/generate-hair": "POST - Remote hair color edit",
            "/api/generate-fashion": "POST - Remote outfit color edit",
            "/api/list-models": "POST - List upstream models",
            "/health": "GET - System health check",
            "/stats": "GET - System statistics"
        }
    }


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "version": VERSION,
        "timestamp": datetime.now().isoformat(),
        "components": {
            "color_analyst": "PersonalColorAnalyst",
            "hair_mask_strategy": settings.hair_mask_strategy,
            "remote_edit_configured": settings.remote_configured
        },
        "total_analyses": analytics['total_analyses']
    }


@app.get("/stats")
async def get_statistics():
    return {
        "total_analyses": analytics['total_analyses'],
        "faces_not_found": analytics['faces_not_found'],
        "most_common_seasons": dict(sorted(
            analytics['common_seasons'].items(),
            key=lambda x: x[1],
            reverse=True
        )),
        "local_simulations": analytics['local_simulations'],
        "remote_edits": analytics['remote_edits'],
        "remote_failures": analytics['remote_failures']
    }


@app.post("/analyze")
async def analyze_image(file: UploadFile = File(...)):
    start_time = time.time()

    try:
        image = await read_upload(file)
        logging.info(f"Analysis started - File: {file.filename}, Size: {image.shape[1]}x{image.shape[0]}")

        landmarks = detect_or_400(image)
        try:
            sample = sample_colors(image, landmarks)
        except InvalidLandmarksError as e:
            raise HTTPException(status_code=422, detail=f"Face landmarks are unusable: {e}")

        diagnosis = analyst.analyze(sample)
        season = diagnosis.season

        analytics['total_analyses'] += 1
        analytics['common_seasons'][season] = analytics['common_seasons'].get(season, 0) + 1

        processing_time = time.time() - start_time
        logging.info(
            f"Analysis completed: {season} scores={dict(diagnosis.scores)} "
            f"contrast={diagnosis.analysis['contrast_value']:.1f} time={processing_time:.2f}s"
        )

        return JSONResponse(content={
            "status": "success",
            "season": season,
            "colors": {
                part: {"rgb": list(getattr(sample, part)), "hex": rgb_to_hex(getattr(sample, part))}
                for part in ('hair', 'eye', 'skin', 'lip')
            },
            "diagnosis": diagnosis.to_dict(),
            "hair_palette": get_hair_color_palette(season),
            "recommended_hair_colors": get_recommended_hair_colors(season),
            "processing_time_seconds": round(processing_time, 3)
        })

    except HTTPException:
        raise

    except Exception as e:
        logging.error(f"Analysis error: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "status": "error",
                "message": str(e),
                "detail": "Analysis failed. Please ensure the image shows a clear front-facing face."
            }
        )


@app.post("/simulate-hair")
async def simulate_hair(
    file: UploadFile = File(...),
    color: str = Form(...),
    strategy: Optional[str] = Form(None)
):
    strategy = strategy or settings.hair_mask_strategy
    if strategy not in STRATEGIES:
        raise HTTPException(status_code=400, detail=f"Unknown strategy '{strategy}'. Use one of {list(STRATEGIES)}.")
    if not is_hex_color(color):
        raise HTTPException(status_code=400, detail=f"Invalid color '{color}'. Use a hex value like #8B4513.")

    image = await read_upload(file)
    landmarks = detect_or_400(image)

    try:
        hair_color = sample_colors(image, landmarks).hair
        mask = build_hair_mask(image, landmarks, hair_color, strategy=strategy)
    except InvalidLandmarksError as e:
        logging.warning(f"Hair mask aborted: {e}")
        raise HTTPException(status_code=422, detail=f"Could not locate the hair region: {e}")

    result = apply_hair_color(image, mask, color)
    analytics['local_simulations'] += 1
    logging.info(f"Local hair simulation - color: {color}, strategy: {strategy}")

    return JSONResponse(content={
        "success": True,
        "color": color,
        "strategy": strategy,
        "imageUrl": image_to_data_url(result)
    })


# ============================================================================
# Password-gated edit proxy
# ============================================================================
class PasswordRequest(BaseModel):
    accessPassword: Optional[str] = None


class HairEditRequest(BaseModel):
    image: str
    prompt: str = ""
    color: str
    accessPassword: Optional[str] = None


class FashionEditRequest(BaseModel):
    image: str
    targetColor: str
    accessPassword: Optional[str] = None


@app.post("/api/verify-password")
def verify_password(body: PasswordRequest):
    rejected = check_password(body.accessPassword)
    if rejected is not None:
        return rejected
    return {
        "success": True,
        "message": "Password verified.",
        "googleApiConfigured": bool(settings.google_api_key)
    }


def run_edit(edit):
    try:
        image = edit(GeminiImageEditor(settings))
    except RemoteConfigurationError as e:
        return error_response(500, str(e), "config")
    except RemoteParseFailure as e:
        analytics['remote_failures'] += 1
        logging.warning(f"Remote edit parse failure: {e}")
        return error_response(500, str(e), "parse")
    except RemoteTransportFailure as e:
        analytics['remote_failures'] += 1
        logging.error(f"Remote edit transport failure: {e}")
        return error_response(500, str(e), "transport")

    analytics['remote_edits'] += 1
    return {"success": True, "imageUrl": image.data_url}


@app.post("/api/generate-hair")
def generate_hair(body: HairEditRequest):
    rejected = check_password(body.accessPassword)
    if rejected is not None:
        return rejected
    return run_edit(lambda editor: editor.edit_hair(body.image, body.color, body.prompt))


@app.post("/api/generate-fashion")
def generate_fashion(body: FashionEditRequest):
    rejected = check_password(body.accessPassword)
    if rejected is not None:
        return rejected
    return run_edit(lambda editor: editor.edit_fashion(body.image, body.targetColor))


@app.post("/api/list-models")
def list_models(body: PasswordRequest):
    rejected = check_password(body.accessPassword)
    if rejected is not None:
        return rejected
    try:
        models = GeminiImageEditor(settings).list_models()
    except RemoteConfigurationError:
        return error_response(500, "GOOGLE_API_KEY not set.", "config")
    return {"success": True, "models": models}


if __name__ == "__main__":
    import uvicorn

    print("\n" + "=" * 70)
    print("Personal Color & Hair Simulation API")
    print("=" * 70)
    print("\nStarting server on http://localhost:8000")
    print("API documentation: http://localhost:8000/docs")
    print("=" * 70 + "\n")

    uvicorn.run(app, host="0.0.0.0", port=8000)

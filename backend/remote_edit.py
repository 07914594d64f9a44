import base64
import binascii
import json
import logging
import re
from typing import NamedTuple

import cv2
import numpy as np
import requests

from errors import (
    CredentialError,
    RemoteConfigurationError,
    RemoteParseFailure,
    RemoteTransportFailure,
)

DATA_URL_PREFIX = re.compile(r'^data:image/[\w.+-]+;base64,')
CODE_FENCE = re.compile(r'```\w*')
WHITESPACE = re.compile(r'\s')

# Shorter candidates are never a usable picture
MIN_BASE64_LENGTH = 100
JSON_IMAGE_KEYS = ('imageUrl', 'image_url', 'image', 'image_base64', 'data', 'b64_json')

SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_NONE"},
]


class ExtractedImage(NamedTuple):
    mime_type: str
    data: str

    @property
    def data_url(self):
        return f"data:{self.mime_type};base64,{self.data}"

    def to_rgb(self):
        return decode_base64_image(self.data)


# ---------------------------------------------------------------------------
# Image <-> data URL
# ---------------------------------------------------------------------------
def image_to_data_url(image_rgb, quality=90):
    bgr = cv2.cvtColor(image_rgb, cv2.COLOR_RGB2BGR)
    ok, buffer = cv2.imencode('.jpg', bgr, [cv2.IMWRITE_JPEG_QUALITY, quality])
    if not ok:
        raise ValueError("Could not encode image as JPEG")
    return "data:image/jpeg;base64," + base64.b64encode(buffer.tobytes()).decode('utf-8')


def strip_data_url(value):
    return DATA_URL_PREFIX.sub('', value.strip())


def decode_base64_image(payload):
    """RGB array for a base64 image payload, or None when it is not an image"""
    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        return None
    if not raw:
        return None
    img = cv2.imdecode(np.frombuffer(raw, np.uint8), cv2.IMREAD_COLOR)
    if img is None:
        return None
    return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)


def clean_base64_text(text):
    cleaned = CODE_FENCE.sub('', text).replace('```', '')
    cleaned = WHITESPACE.sub('', cleaned)
    return strip_data_url(cleaned)


def mime_from_data_url(value, default="image/jpeg"):
    match = re.match(r'^data:(image/[\w.+-]+);base64,', value.strip())
    return match.group(1) if match else default


# ---------------------------------------------------------------------------
# Response shapes, tried in order
# ---------------------------------------------------------------------------
def response_parts(response):
    try:
        parts = response["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        return []
    return [p for p in parts if isinstance(p, dict)] if isinstance(parts, list) else []


def response_text(response):
    for part in response_parts(response):
        if isinstance(part.get("text"), str):
            return part["text"].strip()
    return None


def extract_inline_image(response):
    """Image bytes embedded directly in an inline_data / inlineData part"""
    for part in response_parts(response):
        inline = part.get("inline_data") or part.get("inlineData")
        if not isinstance(inline, dict) or not inline.get("data"):
            continue
        mime = inline.get("mimeType") or inline.get("mime_type") or "image/jpeg"
        if decode_base64_image(inline["data"]) is not None:
            return ExtractedImage(mime, inline["data"])
    return None


def extract_text_base64(response):
    """Base64 payload written as text, possibly fenced or data-URL prefixed"""
    text = response_text(response)
    if not text:
        return None
    cleaned = clean_base64_text(text)
    if len(cleaned) <= MIN_BASE64_LENGTH:
        return None
    if decode_base64_image(cleaned) is None:
        return None
    return ExtractedImage(mime_from_data_url(WHITESPACE.sub('', text)), cleaned)


def extract_json_image(response):
    """Text part holding a JSON object with an image field"""
    text = response_text(response)
    if not text:
        return None
    text = CODE_FENCE.sub('', text).replace('```', '').strip()
    try:
        payload = json.loads(text)
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    for key in JSON_IMAGE_KEYS:
        value = payload.get(key)
        if not isinstance(value, str):
            continue
        cleaned = clean_base64_text(value)
        if len(cleaned) > MIN_BASE64_LENGTH and decode_base64_image(cleaned) is not None:
            return ExtractedImage(mime_from_data_url(value), cleaned)
    return None


IMAGE_EXTRACTORS = (extract_inline_image, extract_text_base64, extract_json_image)


def extract_image(response, extractors=IMAGE_EXTRACTORS):
    for extractor in extractors:
        image = extractor(response)
        if image is not None:
            return image

    raw_text = response_text(response) or "No output"
    raise RemoteParseFailure(
        f"Failed to generate image. Model response: {raw_text[:200]}",
        raw_text=raw_text,
    )


# ---------------------------------------------------------------------------
# Upstream model (server side of the proxy)
# ---------------------------------------------------------------------------
def hair_prompt(color, description, image_native=True):
    prompt = (
        f"Change the hair color of the person in this image to {color} ({description}). "
        "Keep the exact same hairstyle, facial features, face shape, clothing and background. "
        "Do not modify anything except the hair color."
    )
    if image_native:
        return prompt
    return prompt + (
        "\nOUTPUT FORMAT: generate a new JPEG of the result downscaled to 64x64 pixels at "
        "JPEG quality 10 and output ONLY its raw Base64 string. No JSON, no markdown, "
        "no data: prefix."
    )


def fashion_prompt(target_color):
    return (
        f"Change ONLY the color of the clothes/outfit of the person in this image to {target_color}. "
        "DO NOT CHANGE THE HAIR COLOR. Keep the exact same hairstyle, hair color, facial features, "
        "face shape, and background. Preserve the original composition completely."
    )


def is_image_native(model):
    return "image" in model


class GeminiImageEditor:
    """Calls the generateContent endpoint and pulls the edited image out of the reply"""

    def __init__(self, settings, http=requests):
        self.settings = settings
        self.http = http

    def check_configuration(self):
        if not self.settings.google_api_key:
            raise RemoteConfigurationError("Server configuration error: GOOGLE_API_KEY not set.")

    def _post(self, model, payload):
        url = f"{self.settings.gemini_api_base}/v1beta/models/{model}:generateContent"
        try:
            response = self.http.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json",
                         "X-goog-api-key": self.settings.google_api_key},
                timeout=self.settings.remote_timeout_seconds,
            )
        except requests.RequestException as e:
            raise RemoteTransportFailure(f"Google API request failed: {e}") from e

        if not response.ok:
            raise RemoteTransportFailure(f"Google API Error: {response.status_code} - {response.text[:500]}")
        try:
            return response.json()
        except ValueError as e:
            raise RemoteParseFailure("Google API returned a non-JSON body", raw_text=response.text[:200]) from e

    def edit_image(self, image, instruction, model, image_native=None):
        self.check_configuration()
        if image_native is None:
            image_native = is_image_native(model)

        if isinstance(image, np.ndarray):
            image = image_to_data_url(image)

        generation_config = {"temperature": 0.1}
        if image_native:
            generation_config["responseModalities"] = ["TEXT", "IMAGE"]
        else:
            generation_config.update({"response_mime_type": "text/plain", "maxOutputTokens": 8192})

        payload = {
            "contents": [{
                "parts": [
                    {"text": instruction},
                    {"inline_data": {"mime_type": mime_from_data_url(image), "data": strip_data_url(image)}},
                ]
            }],
            "generationConfig": generation_config,
            "safetySettings": SAFETY_SETTINGS,
        }

        logging.info(f"Remote edit requested - model: {model}")
        return extract_image(self._post(model, payload))

    def edit_hair(self, image, color, prompt):
        model = self.settings.hair_edit_model
        instruction = hair_prompt(color, prompt, image_native=is_image_native(model))
        return self.edit_image(image, instruction, model)

    def edit_fashion(self, image, target_color):
        return self.edit_image(image, fashion_prompt(target_color), self.settings.fashion_edit_model)

    def list_models(self):
        self.check_configuration()
        results = {}
        for version in ('v1beta', 'v1'):
            url = f"{self.settings.gemini_api_base}/{version}/models"
            try:
                response = self.http.get(
                    url,
                    params={"key": self.settings.google_api_key},
                    timeout=self.settings.remote_timeout_seconds,
                )
                results[version] = response.json()
            except (requests.RequestException, ValueError) as e:
                results[version] = {"error": str(e)}
        return results


# ---------------------------------------------------------------------------
# Client of the password-gated proxy
# ---------------------------------------------------------------------------
class RemoteEditClient:
    """Session-side gateway: image + instruction -> edited image, via the HTTP proxy"""

    def __init__(self, base_url, timeout=60.0, http=requests):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.http = http

    def _post(self, path, body):
        try:
            response = self.http.post(f"{self.base_url}{path}", json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise RemoteTransportFailure(f"Edit proxy unreachable: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code == 401:
            raise CredentialError(data.get("error") or "Invalid access password.")
        return response, data

    def verify_password(self, password):
        response, data = self._post("/api/verify-password", {"accessPassword": password})
        if response.status_code != 200 or not data.get("success"):
            raise RemoteTransportFailure(data.get("error") or f"Password check failed ({response.status_code})")
        return {"is_valid": True, "google_api_configured": bool(data.get("googleApiConfigured"))}

    def request_edit(self, image, instruction, color_label, password):
        if isinstance(image, np.ndarray):
            image = image_to_data_url(image)

        response, data = self._post("/api/generate-hair", {
            "image": image,
            "prompt": instruction,
            "color": color_label,
            "accessPassword": password,
        })

        if not data.get("success"):
            message = data.get("error") or f"Edit proxy returned {response.status_code}"
            if data.get("errorType") == "parse":
                raise RemoteParseFailure(message)
            raise RemoteTransportFailure(message)

        image_url = data.get("imageUrl")
        if not isinstance(image_url, str) or decode_base64_image(strip_data_url(image_url)) is None:
            raise RemoteParseFailure("Edit proxy returned no usable image")
        return ExtractedImage(mime_from_data_url(image_url), strip_data_url(image_url))

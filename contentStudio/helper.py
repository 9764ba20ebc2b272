import json
import logging
import re

from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


def api_response(data=None, error: str | None = None, status_code: int = 200) -> JSONResponse:
    """Wrap a payload in the {data, error} envelope every route returns."""
    return JSONResponse(status_code=status_code, content={"data": data, "error": error})


def api_error(message: str, status_code: int) -> JSONResponse:
    return api_response(None, message, status_code)


class Clean_JSON:
    def __init__(self, raw_response):
        self.raw_response = raw_response

    def clean_json_response(self):
        """
        Clean and extract JSON from AI response.

        Returns the re-serialized JSON string, or None when no object or
        array can be recovered.
        """
        if not self.raw_response:
            return None

        response = self.raw_response.strip()

        # Remove markdown code blocks - handle various formats
        response = re.sub(r'```json\s*\n?', '', response)
        response = re.sub(r'```\s*$', '', response)
        response = re.sub(r'^```\s*', '', response, flags=re.MULTILINE)
        response = re.sub(r'\s*```$', '', response, flags=re.MULTILINE)
        response = response.strip()

        # Find JSON content between first { and last }
        start = response.find('{')
        end = response.rfind('}')

        if response.startswith('['):
            end = response.rfind(']')
            if end == -1:
                logger.warning("Unterminated JSON array in response: %s...", response[:100])
                return None
            response = response[:end + 1]
        elif start != -1 and end != -1 and end > start:
            response = response[start:end + 1]
        else:
            logger.warning("No valid JSON structure found in response: %s...", response[:100])
            return None

        try:
            parsed = json.loads(response)
            return json.dumps(parsed)
        except json.JSONDecodeError as e:
            logger.debug("JSON decode error: %s, attempting to fix response", e)

        # Fix raw carriage returns inside strings
        fixed_response = response.replace('\r\n', '\\n').replace('\r', '\\n')
        try:
            return json.dumps(json.loads(fixed_response))
        except json.JSONDecodeError:
            pass

        # Try replacing newlines with spaces
        fixed_response = response.replace('\n', ' ').replace('\r', ' ')
        try:
            return json.dumps(json.loads(fixed_response))
        except json.JSONDecodeError:
            pass

        logger.warning("Failed to parse JSON. Raw response: %s...", response[:200])
        return None


def clamp_score(value, default: int) -> int:
    """Coerce a model-provided score to an int in 0-100."""
    try:
        score = int(round(float(value)))
    except (TypeError, ValueError):
        return default
    return max(0, min(100, score))

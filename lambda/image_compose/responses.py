"""
API Gateway / Netlify 응답 형식 생성
- 모든 응답 경로(성공, 오류, preflight)에 CORS 헤더 포함
"""
import json

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


def preflight_response():
    """브라우저 preflight(OPTIONS) 요청에 대한 204 응답"""
    return {
        "statusCode": 204,
        "headers": dict(CORS_HEADERS),
        "body": "",
        "isBase64Encoded": False,
    }


def json_response(status_code, payload):
    headers = {"Content-Type": "application/json"}
    headers.update(CORS_HEADERS)
    return {
        "statusCode": status_code,
        "headers": headers,
        "body": json.dumps(payload, ensure_ascii=False),
        "isBase64Encoded": False,
    }


def success_response(base64_data):
    return json_response(200, {"base64": base64_data})


def error_response(status_code, message):
    """일반적인 JSON 오류 응답을 생성합니다."""
    return json_response(status_code, {"error": message})

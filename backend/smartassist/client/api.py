# smartassist/client/api.py
"""
Thin HTTP client for the SmartAssist REST API.

Wraps any httpx.Client: a real one pointed at a running server
(``httpx.Client(base_url="http://127.0.0.1:8000")``) or FastAPI's TestClient.
Non-2xx responses raise ApiError with the server's ``detail`` message.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _clean(params: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in params.items() if v not in (None, "")}


class ApiClient:
    def __init__(self, http: httpx.Client):
        self.http = http

    @classmethod
    def connect(cls, base_url: str, timeout: float = 90.0) -> "ApiClient":
        return cls(httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout))

    def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            resp = self.http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise ApiError(0, f"{method} {path} failed: {e}") from e

        if resp.status_code >= 400:
            try:
                message = resp.json().get("detail") or resp.text
            except ValueError:
                message = resp.text
            raise ApiError(resp.status_code, str(message))
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    # --- dashboard ---
    def get_stats(self) -> Dict[str, int]:
        return self._request("GET", "/api/stats")

    def me(self) -> Dict[str, Any]:
        return self._request("GET", "/api/me")

    # --- appliances ---
    def list_appliances(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/appliances")

    def get_appliance(self, appliance_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/appliances/{appliance_id}")

    def create_appliance(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/api/appliances", json=data)

    def update_appliance(self, appliance_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PATCH", f"/api/appliances/{appliance_id}", json=data)

    def delete_appliance(self, appliance_id: str) -> None:
        self._request("DELETE", f"/api/appliances/{appliance_id}")

    # --- diagnoses ---
    def list_diagnoses(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/diagnoses")

    def get_diagnosis(self, diagnosis_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/diagnoses/{diagnosis_id}")

    def update_diagnosis(self, diagnosis_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PATCH", f"/api/diagnoses/{diagnosis_id}", json=data)

    def diagnose(self, issue: str, conversation_history: Optional[List[Dict[str, str]]] = None,
                 diagnosis_id: Optional[str] = None, **appliance) -> Dict[str, Any]:
        body = {"issue": issue, "conversationHistory": conversation_history or []}
        if diagnosis_id:
            body["diagnosisId"] = diagnosis_id
        body.update(_clean(appliance))
        return self._request("POST", "/api/diagnose", json=body)

    def analyze_image(self, filename: str, content: bytes, content_type: str,
                      user_description: str = "", appliance_type: Optional[str] = None) -> Dict[str, Any]:
        data = _clean({"userDescription": user_description, "applianceType": appliance_type})
        files = {"image": (filename, content, content_type)}
        return self._request("POST", "/api/analyze-image", data=data, files=files)

    # --- technicians & reviews ---
    def list_technicians(self, city: Optional[str] = None, state: Optional[str] = None,
                         specialty: Optional[str] = None) -> List[Dict[str, Any]]:
        params = _clean({"city": city, "state": state, "specialty": specialty})
        return self._request("GET", "/api/technicians", params=params)

    def get_technician(self, technician_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/technicians/{technician_id}")

    def technician_reviews(self, technician_id: str) -> List[Dict[str, Any]]:
        return self._request("GET", f"/api/technicians/{technician_id}/reviews")

    def create_review(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/api/reviews", json=data)

    # --- bookings & payments ---
    def list_bookings(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/bookings")

    def create_booking(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/api/bookings", json=data)

    def update_booking(self, booking_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PATCH", f"/api/bookings/{booking_id}", json=data)

    def create_payment_intent(self, amount: float, booking_id: Optional[str] = None) -> str:
        body = _clean({"amount": amount, "bookingId": booking_id})
        return self._request("POST", "/api/create-payment-intent", json=body)["clientSecret"]

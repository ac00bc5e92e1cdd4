from fastapi import APIRouter

from complaint_api.api.endpoints import auth, complaints, users

api_router = APIRouter()

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(complaints.router, tags=["Complaints"])
api_router.include_router(users.router, tags=["Users"])

# Listed by GET /api
API_ENDPOINTS = [
    "POST /api/login",
    "POST /api/registeration",
    "POST /api/adminRegisteration",
    "POST /api/complaintform",
    "GET /api/complaints",
    "GET /api/complaints/stats",
    "GET /api/complaints/{id}",
    "PUT /api/complaints/{id}/status",
    "DELETE /api/complaints/{id}",
    "GET /api/users",
]

"""
User Routes

PUT /users/profile - Update own profile
GET /users/connections/requests - Pending connection requests (received and sent)
PUT /users/connections/{user_id} - Accept or reject a received request
GET /users/search/{query} - Search users by name, skill or location
POST /users/connect/{user_id} - Send connection request
GET /users/{user_id} - Public profile (counts a profile view)
"""

from fastapi import APIRouter, HTTPException, Depends

from talentlink.api.deps import Page, pagination_params
from talentlink.core.auth import get_current_user
from talentlink.services.mongo_service import same_id
from talentlink.services.status_rules import CONNECTION_TRANSITIONS, can_transition
from talentlink.services.user_service import UserService
from talentlink.schemas.schemas import (
    ProfileUpdate, ProfileUpdateResponse, UserProfileResponse, UserSearchResponse,
    ConnectionRespond, ConnectionRequestsResponse, ConnectionDirection, ConnectionStatus,
    MessageResponse
)

router = APIRouter(prefix="/users", tags=["Users"])


@router.put("/profile", response_model=ProfileUpdateResponse)
async def update_profile(data: ProfileUpdate, user: dict = Depends(get_current_user)):
    """Update own profile. Only the fields sent are changed."""
    updates = {
        field: value
        for field, value in data.model_dump(exclude_unset=True).items()
        if value is not None
    }
    if "avatar" in updates:
        updates["avatar"] = str(updates["avatar"])

    updated = UserService().update_profile(user["id"], updates)
    return ProfileUpdateResponse(user=updated)


@router.get("/connections/requests", response_model=ConnectionRequestsResponse)
async def get_connection_requests(user: dict = Depends(get_current_user)):
    """Pending requests received (incoming) and sent (outgoing)."""
    return ConnectionRequestsResponse(**UserService().pending_requests(user["id"]))


@router.put("/connections/{user_id}", response_model=MessageResponse)
async def respond_to_connection(user_id: str, data: ConnectionRespond, user: dict = Depends(get_current_user)):
    """Accept or reject a connection request sent by ``user_id``."""
    users = UserService()
    entry = users.find_connection(user, user_id, ConnectionDirection.incoming.value)
    if entry is None:
        raise HTTPException(status_code=404, detail="Connection request not found")

    if not can_transition(CONNECTION_TRANSITIONS, entry["status"], data.status):
        raise HTTPException(
            status_code=400,
            detail=f"Cannot change connection from {entry['status']} to {data.status}"
        )

    users.set_connection_status(user["id"], user_id, data.status)
    return MessageResponse(message=f"Connection {data.status}")


@router.get("/search/{query}", response_model=UserSearchResponse)
async def search_users(query: str, page: Page = Depends(pagination_params)):
    """Search users by name, skill or location (case-insensitive)."""
    users, pagination = UserService().search(query, page.page, page.limit)
    return UserSearchResponse(users=users, pagination=pagination)


@router.post("/connect/{user_id}", response_model=MessageResponse)
async def send_connection_request(user_id: str, user: dict = Depends(get_current_user)):
    """Send a connection request to ``user_id``."""
    if same_id(user_id, user["id"]):
        raise HTTPException(status_code=400, detail="Cannot connect to yourself")

    users = UserService()
    if users.get_by_id(user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")

    received = users.find_connection(user, user_id, ConnectionDirection.incoming.value)
    if received is not None and received.get("status") == ConnectionStatus.pending.value:
        raise HTTPException(status_code=400, detail="This user has already sent you a request")
    if received is not None and received.get("status") == ConnectionStatus.accepted.value:
        raise HTTPException(status_code=400, detail="Already connected with this user")

    if not users.send_connection_request(user["id"], user_id):
        raise HTTPException(status_code=400, detail="Connection request already sent")

    return MessageResponse(message="Connection request sent")


@router.get("/{user_id}", response_model=UserProfileResponse)
async def get_user_profile(user_id: str):
    """Public profile of any user. Email and password are never included."""
    profile = UserService().get_public_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserProfileResponse(user=profile)

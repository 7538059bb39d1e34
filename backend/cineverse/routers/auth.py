from fastapi import APIRouter, Request, Depends
from fastapi.responses import RedirectResponse
from cineverse.dependencies import get_current_user
from cineverse.models.user import User
from cineverse.schemas import UserOut

# Sign-in is handled by the identity provider, which stores user_id in the session
router = APIRouter(prefix="/auth", tags=["auth"])

@router.get("/me", response_model=UserOut)
async def me(user: User = Depends(get_current_user)):
    return user

@router.get("/logout")
async def logout(request: Request):
    request.session.clear()
    return RedirectResponse(url="/", status_code=302)

from fastapi import APIRouter

from form_intake.api import forms, results

router = APIRouter()
router.include_router(results.router, prefix="/results", tags=["Results"])
router.include_router(forms.router, tags=["Forms"])

from fastapi import APIRouter

from ceasefire.models.persona import PERSONAS
from ceasefire.schemas.fight import PersonaResponse

router = APIRouter()


@router.get('', response_model=list[PersonaResponse])
async def list_personas():
    """Animals a fighter can pick."""
    return [
        PersonaResponse(id=animal.value, name=name, emoji=emoji, traits=traits)
        for animal, (name, emoji, traits) in PERSONAS.items()
    ]

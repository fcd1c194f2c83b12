from typing import Any, Dict

from fastapi import HTTPException, Request


async def read_json_object(request: Request) -> Dict[str, Any]:
    """Lit le corps JSON d'une requête; 400 si absent, invalide ou pas un objet."""
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON body")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="JSON body must be an object")
    return body

# barberbook/routers/address_routes.py

from fastapi import APIRouter, HTTPException

from barberbook import maps
from barberbook.schemas import CepLookup

router = APIRouter(
    prefix="/addresses",
    tags=["addresses"],
)


@router.get("/cep/{cep}", response_model=CepLookup)
def lookup_cep(cep: str):
    normalized = maps.normalize_cep(cep)
    if normalized is None:
        raise HTTPException(status_code=422, detail="CEP must have 8 digits")

    result = maps.lookup_cep(normalized)
    if result is None:
        raise HTTPException(status_code=404, detail="CEP not found")
    return result

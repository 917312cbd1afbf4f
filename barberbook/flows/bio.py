# barberbook/flows/bio.py

from pydantic import BaseModel, Field

from barberbook.flows.llm import run_flow

FLOW_NAME = "generateBarberBio"


class GenerateBarberBioInput(BaseModel):
    keywords: str = Field(description="Keywords describing the barber's expertise, e.g. 'classic cuts', 'beard trimming'.")


class GenerateBarberBioOutput(BaseModel):
    bio: str = Field(min_length=1, description="A professional and attractive bio for the barber.")


PROMPT = (
    "Você é um especialista em marketing para barbearias. Crie uma biografia curta (2-3 frases) "
    "e atraente para um barbeiro especialista em \"{keywords}\". Use um tom profissional, moderno "
    "e convidativo. Retorne apenas o texto da biografia em português."
)


def generate_barber_bio(data: GenerateBarberBioInput) -> GenerateBarberBioOutput:
    return run_flow(FLOW_NAME, PROMPT.format(keywords=data.keywords.strip()), GenerateBarberBioOutput)

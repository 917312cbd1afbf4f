# barberbook/flows/reminder.py

from datetime import date

from pydantic import BaseModel, Field

from barberbook.flows.llm import run_flow

FLOW_NAME = "generateAppointmentReminder"

WEEKDAYS_PT = ["segunda-feira", "terça-feira", "quarta-feira", "quinta-feira", "sexta-feira", "sábado", "domingo"]
MONTHS_PT = [
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
]


class GenerateReminderInput(BaseModel):
    client_name: str = Field(description="The name of the client.")
    service: str = Field(description="The service the client has booked.")
    date: str = Field(description="The date of the appointment.")
    time: str = Field(description="The time of the appointment.")
    barber_name: str = Field(description="The name of the barber.")


class GenerateReminderOutput(BaseModel):
    reminder_text: str = Field(min_length=1, description="The generated reminder message.")


PROMPT = """Crie uma mensagem de lembrete amigável e concisa para um agendamento de barbearia, para ser enviada por WhatsApp.

- Cliente: {client_name}
- Serviço: {service}
- Data: {date}
- Hora: {time}
- Barbearia de: {barber_name}

Seja cordial e peça para o cliente confirmar a presença. Retorne apenas o texto da mensagem."""


def long_date_pt(d: date) -> str:
    # e.g. "terça-feira, 21 de outubro de 2026"
    return f"{WEEKDAYS_PT[d.weekday()]}, {d.day} de {MONTHS_PT[d.month - 1]} de {d.year}"


def generate_appointment_reminder(data: GenerateReminderInput) -> GenerateReminderOutput:
    return run_flow(FLOW_NAME, PROMPT.format(**data.model_dump()), GenerateReminderOutput)

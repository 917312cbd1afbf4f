# barberbook/routers/reviews_routes.py

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session, select

from barberbook import core
from barberbook.db import get_session
from barberbook.models import Appointment, Barber, Review
from barberbook.schemas import (
    AppointmentStatus,
    ReviewCreate,
    ReviewPublic,
    ReviewReply,
    ReviewSummary,
)
from barberbook.auth import get_current_user
from barberbook.deps import require_role, require_verified

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["reviews"],
)


@router.post("/appointments/{appt_id}/review", response_model=ReviewPublic, status_code=201)
def submit_review(
    appt_id: int,
    review: ReviewCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "client")
    require_verified(current_user)

    # 1) Only the client who booked, only once, only after completion
    appt = session.get(Appointment, appt_id)
    if appt is None:
        raise HTTPException(status_code=404, detail="Appointment not found")
    if appt.client_id != current_user["id"]:
        raise HTTPException(status_code=403, detail="Forbidden")
    if appt.status != AppointmentStatus.completed.value:
        raise HTTPException(status_code=409, detail="Only completed appointments can be reviewed")
    if appt.reviewed:
        raise HTTPException(status_code=409, detail="Appointment already reviewed")

    barber = session.get(Barber, appt.barber_id)

    # 2) Review, appointment flag and barber rating go in one commit
    db_review = Review(
        barber_id=appt.barber_id,
        client_id=appt.client_id,
        client_name=appt.client_name,
        appointment_id=appt.id,
        rating=review.rating,
        comment=review.comment,
        praises=review.praises,
    )
    appt.reviewed = True
    barber.review_count, barber.rating_average = core.add_rating(
        barber.review_count, barber.rating_average, review.rating
    )

    session.add(db_review)
    session.add(appt)
    session.add(barber)
    session.commit()
    session.refresh(db_review)

    logger.info(f"Review {db_review.id} ({db_review.rating}*) for barber {barber.user_id} on appointment {appt.id}")
    return db_review


@router.get("/barbers/{barber_id}/reviews", response_model=List[ReviewPublic])
def list_reviews(
    barber_id: int,
    stars: Optional[int] = Query(default=None, ge=1, le=5),
    session: Session = Depends(get_session),
):
    if session.get(Barber, barber_id) is None:
        raise HTTPException(status_code=404, detail="Barber Not Found")

    stmt = select(Review).where(Review.barber_id == barber_id)
    if stars is not None:
        stmt = stmt.where(Review.rating == stars)
    stmt = stmt.order_by(Review.created_at.desc(), Review.id.desc())

    return session.exec(stmt).all()


@router.get("/barbers/me/reviews/summary", response_model=ReviewSummary)
def my_review_summary(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "barber")

    reviews = session.exec(
        select(Review).where(Review.barber_id == current_user["id"])
    ).all()
    return core.review_summary(list(reviews))


@router.patch("/reviews/{review_id}/reply", response_model=ReviewPublic)
def reply_to_review(
    review_id: int,
    body: ReviewReply,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "barber")
    require_verified(current_user)

    review = session.get(Review, review_id)
    if review is None:
        raise HTTPException(status_code=404, detail="Review not found")
    if review.barber_id != current_user["id"]:
        raise HTTPException(status_code=403, detail="Forbidden")

    review.reply = body.reply.strip()
    review.replied_at = datetime.utcnow()
    session.add(review)
    session.commit()
    session.refresh(review)
    return review

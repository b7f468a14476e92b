"""
Testimonials module.

Customer reviews submitted from the landing page and published after
admin approval.
"""

from .models import Testimonial
from .schemas import TestimonialCreate, TestimonialOut, TestimonialList
from . import crud, router

__all__ = [
    "Testimonial",
    "TestimonialCreate",
    "TestimonialOut",
    "TestimonialList",
    "crud",
    "router"
]

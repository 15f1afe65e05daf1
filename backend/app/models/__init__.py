from app.models.contact_inquiry import ContactInquiry
from app.models.newsletter_subscriber import NewsletterSubscriber
from app.models.consultation_booking import ConsultationBooking
from app.models.blog_post import BlogPost
from app.models.testimonial import Testimonial
from app.models.case_study import CaseStudy

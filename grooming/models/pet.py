from grooming import db
from datetime import datetime


class Pet(db.Model):
    __tablename__ = 'pets'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    species = db.Column(db.String(100), nullable=True)  # Dog, Cat, ...
    breed = db.Column(db.String(100), nullable=True)
    age = db.Column(db.Integer, nullable=True)
    remark = db.Column(db.String(500), nullable=True)
    customer_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    appointments = db.relationship('Appointment', backref='pet', lazy='dynamic')

    def __init__(self, name, customer_id, species=None, breed=None, age=None, remark=None):
        self.name = name
        self.customer_id = customer_id
        self.species = species
        self.breed = breed
        self.age = age
        self.remark = remark

    def belongs_to(self, customer_id):
        return self.customer_id == customer_id

    def has_appointments(self):
        """A pet with any appointment on record, whatever its status, must be kept."""
        return self.appointments.first() is not None

    def __repr__(self):
        return f'<Pet {self.name}>'

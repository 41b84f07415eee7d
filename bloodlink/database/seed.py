"""
Demo data

Loaded into an empty repository at startup when BLOODLINK_SEED_DEMO_DATA is set.
"""
import logging

from bloodlink.database.storage import Repository

logger = logging.getLogger(__name__)


DEMO_HOSPITALS = [
    {"name": "City General Hospital", "location": "Downtown", "phone": "777-888-9999",
     "blood_types": ["A+", "B+", "O-", "AB+"]},
    {"name": "County Medical Center", "location": "Suburb", "phone": "888-999-0000",
     "blood_types": ["A-", "B-", "O+", "AB-"]},
    {"name": "State University Hospital", "location": "University Area", "phone": "999-000-1111",
     "blood_types": ["A+", "B-", "O-", "AB+"]},
]

DEMO_DONORS = [
    {"user_id": "user-1", "name": "Alice Smith", "age": 28, "blood_type": "A+",
     "phone": "123-456-7890", "email": "alice.smith@example.com", "address": "123 Main St"},
    {"user_id": "user-2", "name": "Bob Johnson", "age": 34, "blood_type": "B-",
     "phone": "987-654-3210", "email": "bob.johnson@example.com", "address": "456 Elm St"},
    {"user_id": "user-3", "name": "Charlie Brown", "age": 22, "blood_type": "O+",
     "phone": "555-123-4567", "email": "charlie.brown@example.com", "address": "789 Oak St"},
    {"user_id": "user-4", "name": "Diana Miller", "age": 41, "blood_type": "AB+",
     "phone": "111-222-3333", "email": "diana.miller@example.com", "address": "101 Pine St"},
    {"user_id": "user-5", "name": "Ethan Davis", "age": 29, "blood_type": "A-",
     "phone": "444-555-6666", "email": "ethan.davis@example.com", "address": "222 Cedar St"},
]

DEMO_RECIPIENTS = [
    {"user_id": "user-6", "name": "Sophia White", "blood_type": "B+", "urgency": "urgent",
     "phone": "222-333-4444", "preferred_hospital": "City General Hospital", "medical_condition": "Anemia"},
    {"user_id": "user-7", "name": "Liam Green", "blood_type": "O-", "urgency": "critical",
     "phone": "333-444-5555", "preferred_hospital": "County Medical Center", "medical_condition": "Surgery required"},
    {"user_id": "user-8", "name": "Olivia Taylor", "blood_type": "AB-", "urgency": "normal",
     "phone": "444-555-7777", "preferred_hospital": "State University Hospital", "medical_condition": "Routine checkup"},
    {"user_id": "user-9", "name": "Noah Anderson", "blood_type": "A+", "urgency": "urgent",
     "phone": "555-666-8888", "preferred_hospital": "City General Hospital", "medical_condition": "Accident victim"},
    {"user_id": "user-10", "name": "Isabella Thomas", "blood_type": "B-", "urgency": "critical",
     "phone": "666-777-9999", "preferred_hospital": "County Medical Center", "medical_condition": "Emergency transfusion"},
]


def seed_demo_data(repository: Repository) -> bool:
    """
    Populate hospitals, donors and recipients if the repository is empty

    Returns True when data was written.
    """
    if not repository.is_empty():
        logger.info("Repository already has data, skipping demo seed")
        return False

    for hospital in DEMO_HOSPITALS:
        repository.hospitals.create(hospital)
    for donor in DEMO_DONORS:
        repository.donors.create(donor)
    for recipient in DEMO_RECIPIENTS:
        repository.recipients.create(recipient)

    logger.info(
        "Seeded demo data: %d hospitals, %d donors, %d recipients",
        len(DEMO_HOSPITALS), len(DEMO_DONORS), len(DEMO_RECIPIENTS),
    )
    return True

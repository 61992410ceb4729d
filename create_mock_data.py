"""
Mock Data Generator for HouseholdHub
Run this script to populate your development database with realistic test data.

Usage:
    python create_mock_data.py

Requirements:
    pip install faker
"""

import random
import uuid
from datetime import datetime, timedelta
from faker import Faker
from sqlalchemy.orm import Session

from app.database import SessionLocal, init_db
from app.models import (
    User,
    Household,
    HouseholdMember,
    RecurrenceRule,
    Chore,
    ChoreAssignment,
    Subtask,
    ChoreHistory,
    ChoreSwapRequest,
    Expense,
    ExpenseSplit,
    ExpenseHistory,
    Receipt,
    Transaction,
    Event,
    EventReminder,
    CalendarEventHistory,
    Thread,
    Message,
    Attachment,
    Reaction,
    Mention,
    MessageRead,
    Poll,
    PollOption,
    PollVote,
    Notification,
    NotificationSettings,
)
from app.models.enums import (
    HouseholdRole,
    ChoreStatus,
    ChorePriority,
    ChoreAction,
    SubtaskStatus,
    ExpenseCategory,
    ExpenseAction,
    TransactionStatus,
    EventCategory,
    EventStatus,
    CalendarEventAction,
    RecurrenceFrequency,
    ReactionType,
    PollType,
    PollStatus,
    NotificationType,
)

# Initialize Faker
fake = Faker()


class MockDataGenerator:
    def __init__(self, db: Session):
        self.db = db
        self.users = []
        self.households = []
        self.memberships = []

    def clear_existing_data(self):
        """Clear existing data (use with caution!)"""
        print("🗑️  Clearing existing data...")

        # Delete in reverse dependency order
        for model in (
            NotificationSettings,
            Notification,
            PollVote,
            PollOption,
            Poll,
            MessageRead,
            Mention,
            Reaction,
            Attachment,
            Message,
        ):
            self.db.query(model).delete()
        for thread in self.db.query(Thread).all():
            thread.participants = []
        self.db.flush()
        for model in (
            Thread,
            EventReminder,
            CalendarEventHistory,
            Event,
            Transaction,
            Receipt,
            ExpenseHistory,
            ExpenseSplit,
            Expense,
            ChoreSwapRequest,
            ChoreHistory,
            Subtask,
            ChoreAssignment,
            Chore,
            RecurrenceRule,
        ):
            self.db.query(model).delete()
        self.db.query(User).update({User.active_household_id: None})
        self.db.query(HouseholdMember).delete()
        self.db.query(Household).delete()
        self.db.query(User).delete()

        self.db.commit()
        print("✅ Existing data cleared")

    def create_users(self, count=20):
        """Create mock users; passwords live in Supabase, only the link is stored"""
        print(f"👥 Creating {count} users...")

        dev_users = [
            {"email": "admin@test.com", "name": "Admin User"},
            {"email": "dev@test.com", "name": "Dev User"},
            {"email": "user@test.com", "name": "Test User"},
        ]

        for dev_user in dev_users:
            user = User(
                email=dev_user["email"],
                name=dev_user["name"],
                supabase_id=str(uuid.uuid4()),
                is_active=True,
                created_at=fake.date_time_between(start_date="-2y", end_date="now"),
            )
            self.db.add(user)
            self.users.append(user)
            print(f"✅ Created dev user: {dev_user['email']}")

        for _ in range(count - len(dev_users)):
            user = User(
                email=fake.unique.email(),
                name=fake.name(),
                supabase_id=str(uuid.uuid4()),
                profile_image_url=fake.image_url() if random.random() < 0.3 else None,
                is_active=True,
                created_at=fake.date_time_between(start_date="-2y", end_date="now"),
            )
            self.db.add(user)
            self.users.append(user)

        self.db.commit()
        print(f"✅ Created {len(self.users)} users")

    def create_households(self, count=5):
        """Create mock households"""
        print(f"🏠 Creating {count} households...")

        house_types = ["House", "Apartment", "Condo", "Townhouse"]
        street_names = ["Oak", "Maple", "Pine", "Cedar", "Elm", "Birch"]

        for _ in range(count):
            household = Household(
                name=f"{random.choice(street_names)} {random.choice(house_types)}",
                currency=random.choice(["USD", "EUR", "GBP"]),
                timezone=fake.timezone(),
                language="en",
                created_at=fake.date_time_between(start_date="-1y", end_date="now"),
            )
            self.db.add(household)
            self.households.append(household)

        self.db.commit()
        print(f"✅ Created {len(self.households)} households")

    def create_household_memberships(self):
        """Every household gets one admin and 2-4 accepted members"""
        print("🔗 Creating household memberships...")

        for household in self.households:
            admin_user = random.choice(self.users)
            self._add_member(household, admin_user, HouseholdRole.ADMIN.value)

            available_users = [u for u in self.users if u.id != admin_user.id]
            for _ in range(min(random.randint(2, 4), len(available_users))):
                user = available_users.pop(random.randint(0, len(available_users) - 1))
                self._add_member(household, user, HouseholdRole.MEMBER.value)

        # Each user works in the first household they joined
        for user in self.users:
            first = next((m for m in self.memberships if m.user_id == user.id), None)
            if first:
                first.is_selected = True
                user.active_household_id = first.household_id

        self.db.commit()
        print(f"✅ Created {len(self.memberships)} memberships")

    def create_chores(self, count_per_household=10):
        """Create chores with subtasks, assignees and a few recurring ones"""
        print(f"🧹 Creating chores ({count_per_household} per household)...")

        chore_titles = [
            "Take out trash",
            "Vacuum living room",
            "Clean bathroom",
            "Wash dishes",
            "Mow the lawn",
            "Water plants",
            "Clean fridge",
            "Laundry",
        ]
        total_chores = 0

        for household in self.households:
            members = self._members_of(household)
            for _ in range(count_per_household):
                status = random.choice(list(ChoreStatus)).value
                rule = None
                if random.random() < 0.3:
                    rule = RecurrenceRule(
                        frequency=random.choice(
                            [RecurrenceFrequency.DAILY, RecurrenceFrequency.WEEKLY]
                        ).value,
                        interval=1,
                    )
                    self.db.add(rule)
                    self.db.flush()

                chore = Chore(
                    title=random.choice(chore_titles),
                    description=fake.sentence(),
                    priority=random.choice(list(ChorePriority)).value,
                    status=status,
                    household_id=household.id,
                    recurrence_rule_id=rule.id if rule else None,
                    due_date=fake.date_time_between(start_date="-7d", end_date="+14d"),
                )
                self.db.add(chore)
                self.db.flush()

                for member in random.sample(members, k=min(len(members), random.randint(1, 2))):
                    self.db.add(
                        ChoreAssignment(
                            chore_id=chore.id,
                            user_id=member.user_id,
                            completed_at=(
                                datetime.utcnow()
                                if status == ChoreStatus.COMPLETED.value
                                else None
                            ),
                        )
                    )

                for _ in range(random.randint(0, 3)):
                    self.db.add(
                        Subtask(
                            chore_id=chore.id,
                            title=fake.sentence(nb_words=4).rstrip("."),
                            status=random.choice(list(SubtaskStatus)).value,
                        )
                    )

                self.db.add(
                    ChoreHistory(
                        chore_id=chore.id,
                        action=ChoreAction.CREATED.value,
                        changed_by_id=random.choice(members).user_id,
                    )
                )
                total_chores += 1

        self.db.commit()
        print(f"✅ Created {total_chores} chores")

    def create_expenses(self, count_per_household=15):
        """Create expenses split equally among members, with pending transactions"""
        print(f"💰 Creating expenses ({count_per_household} per household)...")

        total_expenses = 0
        total_transactions = 0

        for household in self.households:
            members = self._members_of(household)
            for _ in range(count_per_household):
                payer = random.choice(members)
                amount = round(random.uniform(10, 400), 2)
                expense = Expense(
                    description=fake.sentence(nb_words=3).rstrip("."),
                    amount=amount,
                    category=random.choice(list(ExpenseCategory)).value,
                    due_date=fake.date_time_between(start_date="-30d", end_date="+30d"),
                    household_id=household.id,
                    paid_by_id=payer.user_id,
                )
                self.db.add(expense)
                self.db.flush()

                for member, share in self._generate_split_details(members, amount):
                    self.db.add(
                        ExpenseSplit(
                            expense_id=expense.id, user_id=member.user_id, amount=share
                        )
                    )
                    if member.user_id != payer.user_id:
                        self.db.add(
                            Transaction(
                                expense_id=expense.id,
                                from_user_id=member.user_id,
                                to_user_id=payer.user_id,
                                amount=share,
                                status=random.choice(list(TransactionStatus)).value,
                            )
                        )
                        total_transactions += 1

                if random.random() < 0.2:
                    self.db.add(
                        Receipt(
                            expense_id=expense.id,
                            url=fake.image_url(),
                            file_type="image/png",
                        )
                    )

                self.db.add(
                    ExpenseHistory(
                        expense_id=expense.id,
                        action=ExpenseAction.CREATED.value,
                        changed_by_id=payer.user_id,
                    )
                )
                total_expenses += 1

        self.db.commit()
        print(
            f"✅ Created {total_expenses} expenses with {total_transactions} transactions"
        )

    def create_events(self, count_per_household=8):
        """Create calendar events with reminders"""
        print(f"🎉 Creating events ({count_per_household} per household)...")

        total_events = 0

        for household in self.households:
            members = self._members_of(household)
            for _ in range(count_per_household):
                start_time = fake.date_time_between(start_date="-15d", end_date="+30d")
                event = Event(
                    title=fake.catch_phrase(),
                    description=fake.text(max_nb_chars=200),
                    location=fake.street_address(),
                    start_time=start_time,
                    end_time=start_time + timedelta(hours=random.randint(1, 4)),
                    category=random.choice(list(EventCategory)).value,
                    status=(
                        EventStatus.COMPLETED.value
                        if start_time < datetime.utcnow()
                        else EventStatus.SCHEDULED.value
                    ),
                    is_private=random.random() < 0.1,
                    household_id=household.id,
                    created_by_id=random.choice(members).user_id,
                )
                self.db.add(event)
                self.db.flush()

                if start_time > datetime.utcnow():
                    self.db.add(
                        EventReminder(
                            event_id=event.id, time=start_time - timedelta(hours=2)
                        )
                    )

                self.db.add(
                    CalendarEventHistory(
                        event_id=event.id,
                        action=CalendarEventAction.CREATED.value,
                        changed_by_id=event.created_by_id,
                    )
                )
                total_events += 1

        self.db.commit()
        print(f"✅ Created {total_events} events")

    def create_threads(self, count_per_household=3, messages_per_thread=12):
        """Create threads with messages, reactions, mentions and read receipts"""
        print(f"💬 Creating threads ({count_per_household} per household)...")

        total_messages = 0

        for household in self.households:
            members = self._members_of(household)
            for _ in range(count_per_household):
                author = random.choice(members)
                thread = Thread(
                    title=fake.sentence(nb_words=4).rstrip("."),
                    household_id=household.id,
                    author_id=author.user_id,
                )
                thread.participants = list(members)
                self.db.add(thread)
                self.db.flush()

                for _ in range(messages_per_thread):
                    sender = random.choice(members)
                    message = Message(
                        thread_id=thread.id,
                        author_id=sender.user_id,
                        content=fake.sentence(nb_words=random.randint(4, 16)),
                    )
                    self.db.add(message)
                    self.db.flush()

                    for member in members:
                        if member.user_id != sender.user_id and random.random() < 0.6:
                            self.db.add(
                                MessageRead(message_id=message.id, user_id=member.user_id)
                            )
                    if random.random() < 0.3:
                        reactor = random.choice(members)
                        self.db.add(
                            Reaction(
                                message_id=message.id,
                                user_id=reactor.user_id,
                                type=random.choice(list(ReactionType)).value,
                            )
                        )
                    if random.random() < 0.15:
                        mentioned = random.choice(members)
                        self.db.add(
                            Mention(message_id=message.id, user_id=mentioned.user_id)
                        )
                    total_messages += 1

        self.db.commit()
        print(f"✅ Created threads with {total_messages} messages")

    def create_polls(self, count_per_household=2):
        """Create single choice polls attached to a fresh thread message"""
        print(f"🗳️ Creating polls ({count_per_household} per household)...")

        total_polls = 0

        for household in self.households:
            members = self._members_of(household)
            thread = (
                self.db.query(Thread).filter(Thread.household_id == household.id).first()
            )
            if not thread:
                continue

            for _ in range(count_per_household):
                author = random.choice(members)
                question = random.choice(
                    [
                        "What should we have for house dinner?",
                        "Which day works for deep cleaning?",
                        "Should we get a new couch?",
                    ]
                )
                message = Message(
                    thread_id=thread.id, author_id=author.user_id, content=question
                )
                self.db.add(message)
                self.db.flush()

                poll = Poll(
                    message_id=message.id,
                    question=question,
                    poll_type=PollType.SINGLE_CHOICE.value,
                    status=random.choice([PollStatus.OPEN, PollStatus.CLOSED]).value,
                    end_date=datetime.utcnow() + timedelta(days=random.randint(1, 7)),
                )
                self.db.add(poll)
                self.db.flush()

                options = []
                for order, text in enumerate(self._generate_poll_options()):
                    option = PollOption(poll_id=poll.id, text=text, order=order)
                    self.db.add(option)
                    options.append(option)
                self.db.flush()

                for member in members:
                    if random.random() < 0.7:
                        self.db.add(
                            PollVote(
                                poll_id=poll.id,
                                option_id=random.choice(options).id,
                                user_id=member.user_id,
                            )
                        )
                total_polls += 1

        self.db.commit()
        print(f"✅ Created {total_polls} polls with votes")

    def create_notifications(self, count_per_user=8):
        """Create notifications for each user"""
        print(f"🔔 Creating notifications ({count_per_user} per user)...")

        total_notifications = 0

        for user in self.users:
            for _ in range(count_per_user):
                notification_type = random.choice(list(NotificationType))
                is_read = random.choice([True, False])
                self.db.add(
                    Notification(
                        type=notification_type.value,
                        message=self._generate_notification_message(notification_type),
                        is_read=is_read,
                        read_at=datetime.utcnow() if is_read else None,
                        user_id=user.id,
                    )
                )
                total_notifications += 1

        self.db.commit()
        print(f"✅ Created {total_notifications} notifications")

    def create_notification_settings(self):
        """One settings row per user and one per household"""
        print("⚙️ Creating notification settings...")

        for user in self.users:
            self.db.add(
                NotificationSettings(
                    user_id=user.id,
                    reaction_notif=random.choice([True, False]),
                    reminder_notif=random.choice([True, True, False]),
                )
            )
        for household in self.households:
            self.db.add(NotificationSettings(household_id=household.id))

        self.db.commit()
        print(
            f"✅ Created {len(self.users) + len(self.households)} notification settings"
        )

    def _add_member(self, household, user, role):
        membership = HouseholdMember(
            user_id=user.id,
            household_id=household.id,
            role=role,
            is_invited=role != HouseholdRole.ADMIN.value,
            is_accepted=True,
        )
        self.db.add(membership)
        self.memberships.append(membership)
        return membership

    def _members_of(self, household):
        return [m for m in self.memberships if m.household_id == household.id]

    def _generate_split_details(self, members, amount):
        """Equal split, remainder cents go to the first member"""
        share = round(amount / len(members), 2)
        shares = [share] * len(members)
        shares[0] = round(amount - share * (len(members) - 1), 2)
        return list(zip(members, shares))

    def _generate_poll_options(self):
        option_sets = [
            ["Pizza", "Tacos", "Sushi", "Pasta"],
            ["Saturday", "Sunday"],
            ["Yes", "No", "Maybe later"],
        ]
        return random.choice(option_sets)

    def _generate_notification_message(self, notification_type):
        messages = {
            NotificationType.NEW_MESSAGE: "You have a new message",
            NotificationType.CHORE_ASSIGNED: "A chore was assigned to you",
            NotificationType.CHORE_DUE_SOON: "A chore is due soon",
            NotificationType.CHORE_COMPLETED: "A chore was completed",
            NotificationType.EVENT_REMINDER: "An event is starting soon",
            NotificationType.EXPENSE_UPDATED: "An expense was updated",
            NotificationType.PAYMENT_REMINDER: "You have a pending payment",
        }

        return messages.get(notification_type, fake.sentence())

    def generate_all_data(self, clear_existing=False):
        """Generate all mock data"""
        print("🚀 Starting mock data generation...")

        if clear_existing:
            self.clear_existing_data()

        # Create data in dependency order
        self.create_users(count=20)
        self.create_households(count=5)
        self.create_household_memberships()
        self.create_chores(count_per_household=10)
        self.create_expenses(count_per_household=15)
        self.create_events(count_per_household=8)
        self.create_threads(count_per_household=3)
        self.create_polls(count_per_household=2)
        self.create_notifications(count_per_user=8)
        self.create_notification_settings()

        print("🎉 Mock data generation completed!")
        print("📊 Summary:")
        print(f"   - Users: {len(self.users)}")
        print(f"   - Households: {len(self.households)}")
        print(f"   - Memberships: {len(self.memberships)}")
        print("   - Plus chores, expenses, events, threads, polls and more!")


def main():
    """Main function to run the mock data generator"""
    print("🏠 HouseholdHub Mock Data Generator")
    print("=" * 40)

    init_db()
    db = SessionLocal()

    try:
        generator = MockDataGenerator(db)

        clear_existing = input("Clear existing data? (y/N): ").lower().startswith("y")
        generator.generate_all_data(clear_existing=clear_existing)

        print("\n✅ Mock data generation successful!")
        print("You can now use your application with realistic test data.")

    except Exception as e:
        print(f"\n❌ Error generating mock data: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()

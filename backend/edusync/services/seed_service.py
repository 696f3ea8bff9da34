"""Database seeding service for demo data."""
from edusync import db
from edusync.models.user import User, UserRole
from edusync.models.course import Course, Enrollment

class SeedService:
    """Service to seed database with demo data."""

    DEMO_CLASS_CODE = 'CS101'

    @staticmethod
    def seed_all():
        """Seed all demo data."""
        lecturer = SeedService.seed_lecturer()
        course = SeedService.seed_class(lecturer)
        students = SeedService.seed_students()
        SeedService.seed_enrollments(course, students)

    @staticmethod
    def seed_lecturer() -> User:
        """Seed the demo lecturer."""
        lecturer = User.query.filter_by(email='lecturer@edusync.edu').first()
        if not lecturer:
            lecturer = User(
                email='lecturer@edusync.edu',
                first_name='Nadia',
                last_name='Perera',
                role=UserRole.LECTURER
            )
            lecturer.set_password('lecturer123')
            db.session.add(lecturer)
            db.session.commit()
        print(f"✅ Lecturer: {lecturer.email} / lecturer123")
        return lecturer

    @staticmethod
    def seed_class(lecturer: User) -> Course:
        """Seed the demo class."""
        course = Course.get_by_code(SeedService.DEMO_CLASS_CODE)
        if not course:
            course = Course(
                class_code=SeedService.DEMO_CLASS_CODE,
                class_name='Introduction to Programming',
                lecturer_id=lecturer.id,
                academic_year='Year 1',
                semester='Semester 1'
            )
            db.session.add(course)
            db.session.commit()
        print(f"✅ Class: {course.class_code}")
        return course

    @staticmethod
    def seed_students(count: int = 10) -> list:
        """Seed demo students."""
        students = []
        for number in range(1, count + 1):
            index_no = f"CS2026{number:03d}"
            student = User.query.filter_by(index_no=index_no).first()
            if not student:
                student = User(
                    email=f"{index_no.lower()}@edusync.edu",
                    first_name='Student',
                    last_name=f"{number:03d}",
                    role=UserRole.STUDENT,
                    index_no=index_no,
                    department='Computer Science',
                    academic_year='Year 1',
                    semester='Semester 1'
                )
                student.set_password('student123')
                db.session.add(student)
            students.append(student)

        db.session.commit()
        print(f"✅ Created {len(students)} students")
        return students

    @staticmethod
    def seed_enrollments(course: Course, students: list):
        """Enroll every demo student in the demo class."""
        for student in students:
            if not Enrollment.is_enrolled(course.class_code, student.id):
                db.session.add(Enrollment(class_code=course.class_code, student_id=student.id))

        db.session.commit()
        print(f"✅ Enrolled {Enrollment.roster_size(course.class_code)} students in {course.class_code}")

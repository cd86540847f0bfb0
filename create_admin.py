import sys
import psycopg2
from app.core.security import hash_password
from app.core.config import settings
from urllib.parse import urlparse

def create_admin_account(username: str, password: str) -> bool:
    if len(password) < settings.MIN_ADMIN_PASSWORD_LENGTH:
        print(f"Error: password must be at least {settings.MIN_ADMIN_PASSWORD_LENGTH} characters long")
        return False

    try:
        db_url = urlparse(settings.DATABASE_URL.replace("postgresql+asyncpg://", "postgresql://"))

        conn = psycopg2.connect(
            host=db_url.hostname or "localhost",
            port=db_url.port or 5432,
            user=db_url.username or "postgres",
            password=db_url.password or "postgres",
            database=db_url.path.lstrip("/") or "postgres"
        )

        try:
            with conn, conn.cursor() as cursor:
                cursor.execute("SELECT id FROM admins WHERE username = %s", (username,))
                if cursor.fetchone():
                    print(f"Error: Admin '{username}' already exists")
                    return False

                cursor.execute(
                    "INSERT INTO admins (username, password_hash, created_at, updated_at) "
                    "VALUES (%s, %s, NOW(), NOW()) RETURNING id",
                    (username, hash_password(password))
                )
                admin_id = cursor.fetchone()[0]
        finally:
            conn.close()

        print(f"Admin '{username}' created successfully")
        print(f"Admin ID: {admin_id}")
        return True

    except psycopg2.Error as e:
        print(f"Error creating admin account: {e}")
        return False


def main():
    if len(sys.argv) < 3:
        print("Usage: python create_admin.py <username> <password>")
        sys.exit(1)

    username = sys.argv[1]
    password = sys.argv[2]

    if not username or not password:
        print("Error: username and password cannot be empty")
        sys.exit(1)

    success = create_admin_account(username, password)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()

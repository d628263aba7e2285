from dataclasses import dataclass


class Role:
    ADMIN = "admin"
    USER = "user"

    ALL = (ADMIN, USER)


@dataclass
class User:
    id: str
    first_name: str
    last_name: str
    email: str
    phone: str
    password: str  # bcrypt hash, never the plain value
    role: str = Role.USER

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "password": self.password,
            "role": self.role,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        return cls(
            id=str(data["id"]),
            first_name=data.get("firstName", ""),
            last_name=data.get("lastName", ""),
            email=data["email"],
            phone=data.get("phone", ""),
            password=data.get("password", ""),
            role=data.get("role", Role.USER),
        )

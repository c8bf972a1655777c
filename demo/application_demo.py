import logging

from space.base import Application, Module, SpaceObject


class Database(SpaceObject):
    dependencies = {"configuration": "configuration"}

    def on_dependencies_ready(self) -> None:
        super().on_dependencies_ready()
        self.url = self.configuration["database"]["url"]
        self.connected = False

    def connect(self) -> None:
        print(f"[DB] Connecting to {self.url}")
        self.connected = True

    def disconnect(self) -> None:
        print(f"[DB] Disconnecting from {self.url}")
        self.connected = False

    def query(self, sql: str) -> str:
        assert self.connected, "Not connected to database"
        return f"Result: {sql}"


class UserService(SpaceObject):
    dependencies = {"db": "demo.Database"}

    mixin = {
        "on_dependencies_ready": lambda self: logging.getLogger(__name__).info(
            "UserService wired to %s", self.db.url
        )
    }

    def create_user(self, name: str) -> str:
        return self.db.query(f"INSERT INTO users (name) VALUES ('{name}')")


class DatabaseModule(Module):
    name = "demo.DatabaseModule"
    configuration = {"database": {"url": "postgresql://localhost:5432/dev", "pool": 5}}
    singletons = {"demo.Database": Database}

    def on_start(self) -> None:
        self.injector.get("demo.Database").connect()

    def on_reset(self) -> None:
        self.injector.get("demo.Database").disconnect()


class UsersModule(Module):
    name = "demo.UsersModule"
    required_modules = ["demo.DatabaseModule"]

    def on_initialize(self) -> None:
        self.injector.map("demo.UserService").to_singleton(UserService)


class DemoApp(Application):
    required_modules = ["demo.UsersModule"]
    dependencies = {"users": "demo.UserService"}

    def after_start(self) -> None:
        print("\n[APP] Inside application logic")
        print(self.users.create_user("alice"))
        print(self.users.create_user("bob"))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    print("=== Application Demo ===\n")
    DatabaseModule.publish()
    UsersModule.publish()

    print("1. Creating application (modules are initialized)...")
    print("-" * 50)
    app = DemoApp(configuration={"database": {"url": "postgresql://localhost:5432/mydb"}})
    print(f"Module order: {' -> '.join(app.module_order)}")
    print(f"Merged configuration: {app.configuration}")

    print("\n2. Starting application...")
    print("-" * 50)
    app.start()

    print("\n3. Stopping application (modules are reset in reverse order)...")
    print("-" * 50)
    app.stop()

    print("\nDemo completed successfully!")

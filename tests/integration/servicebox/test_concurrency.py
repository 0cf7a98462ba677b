"""Integration tests for concurrent resolution."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

from servicebox import ContainerOptions, DIContainer, DuplicatePolicy, TypeIdentity


class Connection:
    pass


class Pool:
    def __init__(self, connection: Connection):
        self.connection = connection


class TestConcurrentSingletonResolution:
    """Test that singletons are created once under concurrent first use."""

    def test_concurrent_first_resolution_creates_once(self):
        """Test that many threads racing on a new singleton see one instance."""
        calls = []
        lock = threading.Lock()
        start = threading.Barrier(16)

        def slow_factory():
            with lock:
                calls.append(threading.get_ident())
            time.sleep(0.05)
            return Connection()

        container = DIContainer()
        container.add_singleton(Connection, factory=slow_factory)

        def resolve(_):
            start.wait()
            return container.get_required_service(Connection)

        with ThreadPoolExecutor(max_workers=16) as executor:
            results = list(executor.map(resolve, range(16)))

        assert len(calls) == 1
        assert all(result is results[0] for result in results)

    def test_concurrent_nested_singletons(self):
        """Test racing resolution of a singleton whose builder resolves another singleton."""
        created = {"connection": 0, "pool": 0}
        lock = threading.Lock()
        start = threading.Barrier(8)

        def make_connection():
            with lock:
                created["connection"] += 1
            time.sleep(0.02)
            return Connection()

        def make_pool(provider):
            with lock:
                created["pool"] += 1
            return Pool(provider.get_required_service(Connection))

        container = DIContainer()
        container.add_singleton(Connection, factory=make_connection)
        container.add_singleton(Pool, builder=make_pool)

        def resolve(index):
            start.wait()
            if index % 2:
                return container.get_required_service(Pool).connection
            return container.get_required_service(Connection)

        with ThreadPoolExecutor(max_workers=8) as executor:
            connections = list(executor.map(resolve, range(8)))

        assert created == {"connection": 1, "pool": 1}
        assert all(connection is connections[0] for connection in connections)

    def test_concurrent_transients_are_distinct(self):
        """Test that transient resolution from many threads yields distinct objects."""
        container = DIContainer()
        container.add_transient(Connection)

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(lambda _: container.get_required_service(Connection), range(32)))

        assert len({id(result) for result in results}) == 32

    def test_registration_while_resolving(self):
        """Test that registering services while other threads resolve is safe."""
        container = DIContainer()
        container.add_singleton(Connection)
        types = [type(f"Service{i}", (), {}) for i in range(50)]
        errors = []

        def register():
            for service_type in types:
                container.add_transient(service_type)

        def resolve():
            try:
                for _ in range(200):
                    container.get_required_service(Connection)
                    for service_type in types:
                        container.get_service(service_type)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=register)] + [threading.Thread(target=resolve) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert all(container.is_registered(service_type) for service_type in types)


class OldConnection(Connection):
    pass


class NewConnection(Connection):
    pass


class TestResolutionDuringReconfiguration:
    """Test that replacing or clearing registrations mid-resolution never serves stale singletons."""

    def test_replace_after_lookup_serves_new_registration(self, monkeypatch):
        """Test that a resolution holding the old registration does not cache its instance."""
        container = DIContainer(ContainerOptions(duplicate_policy=DuplicatePolicy.REPLACE))
        container.add_singleton(Connection, OldConnection)

        looked_up = threading.Event()
        resume = threading.Event()
        original_lookup = container._registry.lookup
        paused = []

        def lookup_then_wait(identity):
            registration = original_lookup(identity)
            if not paused:
                paused.append(identity)
                looked_up.set()
                resume.wait(timeout=5)
            return registration

        monkeypatch.setattr(container._registry, "lookup", lookup_then_wait)
        results = []
        resolver = threading.Thread(target=lambda: results.append(container.get_required_service(Connection)))
        resolver.start()

        assert looked_up.wait(timeout=5)
        container.add_singleton(Connection, NewConnection)
        resume.set()
        resolver.join(timeout=5)

        assert isinstance(results[0], OldConnection)
        current = container.get_required_service(Connection)
        assert isinstance(current, NewConnection)
        assert container.get_required_service(Connection) is current

    def test_clear_during_creation_does_not_leak_instance(self):
        """Test that a creation finishing after clear() is not served to the next registration."""
        container = DIContainer()
        started = threading.Event()
        release = threading.Event()

        def blocking_factory():
            started.set()
            release.wait(timeout=5)
            return OldConnection()

        container.add_singleton(Connection, factory=blocking_factory)
        results = []
        resolver = threading.Thread(target=lambda: results.append(container.get_required_service(Connection)))
        resolver.start()

        assert started.wait(timeout=5)
        container.clear()
        container.add_singleton(Connection, NewConnection)
        release.set()
        resolver.join(timeout=5)

        assert isinstance(results[0], OldConnection)
        current = container.get_required_service(Connection)
        assert isinstance(current, NewConnection)
        assert container.get_required_service(Connection) is current

    def test_clear_during_creation_keeps_single_creator(self):
        """Test that clear() does not let a second thread run a creator already in flight."""
        container = DIContainer()
        started = threading.Event()
        release = threading.Event()
        calls = []

        def blocking_factory():
            calls.append(threading.get_ident())
            started.set()
            release.wait(timeout=5)
            return OldConnection()

        container.add_singleton(Connection, factory=blocking_factory)
        registration = container._registry.lookup(TypeIdentity.of(Connection))
        first = threading.Thread(target=container.get_required_service, args=(Connection,))
        first.start()
        assert started.wait(timeout=5)

        container._lifetime_manager.clear_cache()
        second_done = threading.Event()

        def resolve_again():
            container._lifetime_manager.get_or_create(registration)
            second_done.set()

        second = threading.Thread(target=resolve_again)
        second.start()

        assert not second_done.wait(timeout=0.2)
        release.set()
        first.join(timeout=5)
        second.join(timeout=5)

        assert len(calls) == 1

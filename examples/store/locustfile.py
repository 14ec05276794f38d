import random
from threading import Lock
from locust import HttpUser, task, between


_ids_lock = Lock()
_ids = []


def _rand_price() -> int:
    return random.randint(0, 10_000)


def _pick_id():
    with _ids_lock:
        return random.choice(_ids) if _ids else None


def _forget_id(price_id: str) -> None:
    with _ids_lock:
        try:
            _ids.remove(price_id)
        except ValueError:
            pass


class PriceUser(HttpUser):
    wait_time = between(0.05, 0.15)

    @task(5)
    def list_prices(self):
        self.client.get("/price", name="GET /price")

    @task(3)
    def create_and_get(self):
        r = self.client.post("/price", json={"price": _rand_price()}, name="POST /price")
        if r.status_code == 200 and r.text:
            price_id = r.text.strip()
            with _ids_lock:
                _ids.append(price_id)
            self._get(price_id)

    @task(2)
    def update(self):
        price_id = _pick_id()
        if price_id is None:
            return
        with self.client.patch(
            f"/price/{price_id}",
            json={"price": _rand_price()},
            name="PATCH /price/:id",
            catch_response=True,
        ) as r:
            # another user may have deleted it in the meantime
            if r.status_code in (200, 404):
                r.success()

    @task(1)
    def delete(self):
        price_id = _pick_id()
        if price_id is None:
            return
        with self.client.delete(
            f"/price/{price_id}", name="DELETE /price/:id", catch_response=True
        ) as r:
            if r.status_code in (200, 404):
                r.success()
        _forget_id(price_id)

    def _get(self, price_id: str):
        with self.client.get(
            f"/price/{price_id}", name="GET /price/:id", catch_response=True
        ) as r:
            if r.status_code in (200, 404):
                r.success()

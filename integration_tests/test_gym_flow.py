"""End-to-end flows through the HTTP API over the demo gym.

The demo gym comes from ``gymkeep seed-demo``: an owner, a trainer matched
with a student, a three-exercise program assigned to the student, and a shop
where the student already ordered 2 of the 10 protein tubs.
"""

import re


def find(items, **match):
    return next(
        item for item in items if all(item.get(key) == value for key, value in match.items())
    )


class TestShopFlow:
    """Ordering, stock accounting and order administration."""

    def test_order_cancel_restores_stock(self, demo_client, sign_in):
        student = sign_in("student@demo.gym")
        owner = sign_in("owner@demo.gym")

        products = demo_client.get("/api/products", headers=student).json()["data"]
        protein = find(products, name="Whey Protein")
        shaker = find(products, name="Shaker Bottle")
        assert protein["stockQuantity"] == 8

        response = demo_client.post(
            "/api/orders",
            json={
                "items": [
                    {"productId": protein["id"], "quantity": 3},
                    {"productId": shaker["id"], "quantity": 1},
                ],
                "metadata": {"notes": "Pick up after class", "pickup": "front desk"},
            },
            headers=student,
        )
        assert response.status_code == 201, response.text
        order = response.json()["data"]
        assert order["totalAmount"] == "83.50"
        assert order["status"] == "pending_approval"
        assert order["metadata"] == {"notes": "Pick up after class", "pickup": "front desk"}
        assert re.fullmatch(r"ORD-\d{8}-00002", order["orderNumber"])

        too_many = demo_client.post(
            "/api/orders",
            json={"items": [{"productId": protein["id"], "quantity": 6}]},
            headers=student,
        )
        assert too_many.status_code == 400
        assert "Insufficient stock" in too_many.json()["message"]

        forbidden = demo_client.patch(
            f"/api/orders/{order['id']}/status", json={"status": "cancelled"}, headers=student
        )
        assert forbidden.status_code == 403

        for status in ("prepared", "cancelled"):
            response = demo_client.patch(
                f"/api/orders/{order['id']}/status", json={"status": status}, headers=owner
            )
            assert response.status_code == 200, response.text

        protein = demo_client.get(f"/api/products/{protein['id']}", headers=owner).json()["data"]
        assert protein["stockQuantity"] == 8

        reopened = demo_client.patch(
            f"/api/orders/{order['id']}/status", json={"status": "prepared"}, headers=owner
        )
        assert reopened.status_code == 409

    def test_completed_orders_count_as_revenue(self, demo_client, sign_in):
        owner = sign_in("owner@demo.gym")
        orders = demo_client.get("/api/orders", headers=owner).json()["data"]
        assert len(orders) == 1

        demo_client.patch(
            f"/api/orders/{orders[0]['id']}/status", json={"status": "completed"}, headers=owner
        )
        stats = demo_client.get("/api/orders/stats", headers=owner).json()["data"]

        assert stats["byStatus"]["completed"] == 1
        assert stats["totalRevenue"] == "50.00"

        blocked = demo_client.delete(f"/api/orders/{orders[0]['id']}", headers=owner)
        assert blocked.status_code == 400

    def test_hidden_products_disappear_for_members(self, demo_client, sign_in):
        owner = sign_in("owner@demo.gym")
        student = sign_in("student@demo.gym")
        products = demo_client.get("/api/products", headers=owner).json()["data"]
        shaker = find(products, name="Shaker Bottle")

        demo_client.patch(f"/api/products/{shaker['id']}/toggle", headers=owner)

        visible = demo_client.get("/api/products", headers=student).json()["data"]
        assert [p["name"] for p in visible] == ["Whey Protein"]


class TestProgramFlow:
    """Program editing and workout logging."""

    def test_reorder_move_and_remove(self, demo_client, sign_in):
        trainer = sign_in("trainer@demo.gym")
        program = demo_client.get("/api/programs", headers=trainer).json()["data"][0]
        base = f"/api/programs/{program['id']}/exercises"

        entries = demo_client.get(base, headers=trainer).json()["data"]
        assert [e["exercise"]["name"] for e in entries] == ["Back Squat", "Push-up", "Plank"]

        response = demo_client.post(
            f"{base}/reorder",
            json={
                "exerciseOrders": [
                    {"id": entry["id"], "orderIndex": 2 - entry["orderIndex"]}
                    for entry in entries
                ]
            },
            headers=trainer,
        )
        assert response.status_code == 200, response.text
        assert [e["exercise"]["name"] for e in response.json()["data"]] == [
            "Plank",
            "Push-up",
            "Back Squat",
        ]

        partial = demo_client.post(
            f"{base}/reorder",
            json={"exerciseOrders": [{"id": entries[0]["id"], "orderIndex": 0}]},
            headers=trainer,
        )
        assert partial.status_code == 400

        plank = find(entries, orderIndex=2)
        moved = demo_client.put(
            f"{base}/{plank['id']}", json={"orderIndex": 2, "sets": 4}, headers=trainer
        )
        assert moved.json()["data"]["orderIndex"] == 2
        assert moved.json()["data"]["sets"] == 4

        current = demo_client.get(base, headers=trainer).json()["data"]
        demo_client.delete(f"{base}/{current[0]['id']}", headers=trainer)

        remaining = demo_client.get(base, headers=trainer).json()["data"]
        assert [e["orderIndex"] for e in remaining] == [0, 1]
        assert [e["exercise"]["name"] for e in remaining] == ["Back Squat", "Plank"]

    def test_student_workout_visible_to_trainer(self, demo_client, sign_in):
        student = sign_in("student@demo.gym")
        trainer = sign_in("trainer@demo.gym")

        program = demo_client.get("/api/programs", headers=student).json()["data"][0]
        detail = demo_client.get(f"/api/programs/{program['id']}", headers=student).json()["data"]
        squat = find(detail["exercises"], orderIndex=0)

        started = demo_client.post(
            "/api/workout-logs/start", json={"programId": program["id"]}, headers=student
        )
        assert started.status_code == 201
        log = started.json()["data"]

        again = demo_client.post(
            "/api/workout-logs/start", json={"programId": program["id"]}, headers=student
        )
        assert again.status_code == 409

        logged = demo_client.post(
            f"/api/workout-logs/{log['id']}/sets",
            json={
                "exerciseId": squat["exerciseId"],
                "setNumber": 1,
                "repsCompleted": 5,
                "weightKg": 80,
                "rpe": 8,
            },
            headers=student,
        )
        assert logged.status_code == 201, logged.text

        ended = demo_client.put(f"/api/workout-logs/{log['id']}/end", json={}, headers=student)
        assert ended.json()["data"]["isActive"] is False
        assert len(ended.json()["data"]["entries"]) == 1

        student_id = log["userId"]
        seen = demo_client.get(
            f"/api/workout-logs?userId={student_id}", headers=trainer
        ).json()
        assert [item["id"] for item in seen["data"]] == [log["id"]]
        assert seen["pagination"]["total"] == 1


class TestTenantAdministration:
    def test_deactivated_gym_locks_out_members(self, demo_client, sign_in):
        root = sign_in("root@demo.gym")
        gyms = demo_client.get("/api/gyms", headers=root).json()["data"]
        demo = find(gyms, slug="demo-gym")

        response = demo_client.patch(f"/api/gyms/{demo['id']}/toggle-active", headers=root)
        assert response.json()["data"]["isActive"] is False

        login = demo_client.post(
            "/api/auth/login", json={"email": "student@demo.gym", "password": "demo1234"}
        )
        assert login.status_code == 401


class TestDashboard:
    def test_owner_dashboard(self, demo_client, sign_in):
        owner = sign_in("owner@demo.gym")

        summary = demo_client.get("/api/analytics/summary", headers=owner).json()["data"]
        assert summary["pendingOrders"] == 1
        assert summary["totalRevenue"] == "0.00"
        assert summary["totalStudents"] == 1
        assert summary["activeStudents"] == 1

        orders = demo_client.get("/api/orders", headers=owner).json()["data"]
        demo_client.patch(
            f"/api/orders/{orders[0]['id']}/status", json={"status": "completed"}, headers=owner
        )
        top = demo_client.get("/api/analytics/top-products", headers=owner).json()["data"]
        assert [(p["name"], p["totalSold"]) for p in top] == [("Whey Protein", 2)]

        trend = demo_client.get("/api/analytics/revenue-trend?days=7", headers=owner).json()
        assert [day["revenue"] for day in trend["data"]] == ["50.00"]

    def test_students_cannot_read_student_activity(self, demo_client, sign_in):
        student = sign_in("student@demo.gym")

        response = demo_client.get("/api/analytics/active-students", headers=student)

        assert response.status_code == 403
        statuses = demo_client.get("/api/analytics/order-status", headers=student).json()
        assert {"status": "pending_approval", "count": 1} in statuses["data"]

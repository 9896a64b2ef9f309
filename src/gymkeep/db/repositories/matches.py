"""Repository for trainer-student matches."""

import aiosqlite

from ...models.common import Page, new_id, parse_timestamp
from ...models.trainer_match import MatchStatus, TrainerMatch
from ..engine import connect, transaction
from .base import Repository, now_iso
from .identity import UserRepository


class TrainerMatchRepository(Repository):
    """Repository for trainer matches.

    The table keeps one row per ``(trainer, student)`` pair, including ended
    and soft-deleted ones, so a pair can be reactivated in place.
    """

    table = "trainer_matches"

    async def activate(self, gym_id: str, trainer_id: str, student_id: str) -> TrainerMatch:
        """Create the pair's match, or reactivate its existing row."""
        stamp = now_iso()
        async with transaction(self.db_path) as db:
            cursor = await db.execute(
                "SELECT id FROM trainer_matches WHERE trainer_id = ? AND student_id = ?",
                (trainer_id, student_id),
            )
            row = await cursor.fetchone()
            if row is None:
                match_id = new_id()
                await db.execute(
                    """
                    INSERT INTO trainer_matches
                    (id, gym_id, trainer_id, student_id, status, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        match_id,
                        gym_id,
                        trainer_id,
                        student_id,
                        MatchStatus.ACTIVE.value,
                        stamp,
                        stamp,
                    ),
                )
            else:
                match_id = row["id"]
                await db.execute(
                    "UPDATE trainer_matches "
                    "SET status = ?, deleted_at = NULL, updated_at = ? WHERE id = ?",
                    (MatchStatus.ACTIVE.value, stamp, match_id),
                )
        return await self.get(match_id, gym_id)

    async def find_pair(self, trainer_id: str, student_id: str) -> TrainerMatch | None:
        """Live match for a pair, whatever its status."""
        return await self._get_live(
            "trainer_id = ? AND student_id = ?", (trainer_id, student_id)
        )

    async def get(self, match_id: str, gym_id: str) -> TrainerMatch | None:
        match = await self._get_live("id = ? AND gym_id = ?", (match_id, gym_id))
        if match is not None:
            await self._attach_people([match])
        return match

    async def list_page(
        self,
        gym_id: str,
        page: int,
        limit: int,
        status: MatchStatus | None = None,
        trainer_id: str | None = None,
        student_id: str | None = None,
    ) -> Page:
        where = ["gym_id = ?"]
        params: list = [gym_id]
        if status is not None:
            where.append("status = ?")
            params.append(status.value)
        if trainer_id:
            where.append("trainer_id = ?")
            params.append(trainer_id)
        if student_id:
            where.append("student_id = ?")
            params.append(student_id)
        result = await self._paginate(" AND ".join(where), params, page, limit)
        await self._attach_people(result.items)
        return result

    async def active_student_ids(self, trainer_id: str) -> list[str]:
        """Students currently coached by a trainer."""
        rows = await self._fetch_all(
            "SELECT student_id FROM trainer_matches "
            "WHERE trainer_id = ? AND status = ? AND deleted_at IS NULL",
            (trainer_id, MatchStatus.ACTIVE.value),
        )
        return [row["student_id"] for row in rows]

    async def active_for_student(self, student_id: str, gym_id: str) -> TrainerMatch | None:
        match = await self._get_live(
            "student_id = ? AND gym_id = ? AND status = ?",
            (student_id, gym_id, MatchStatus.ACTIVE.value),
        )
        if match is not None:
            await self._attach_people([match])
        return match

    async def set_status(self, match_id: str, gym_id: str, status: MatchStatus) -> TrainerMatch:
        await self._update_fields(match_id, {"status": status.value})
        return await self.get(match_id, gym_id)

    async def end(self, match_id: str) -> None:
        """End a match and hide it from live queries."""
        stamp = now_iso()
        async with connect(self.db_path) as db:
            await db.execute(
                "UPDATE trainer_matches SET status = ?, deleted_at = ?, updated_at = ? "
                "WHERE id = ?",
                (MatchStatus.ENDED.value, stamp, stamp, match_id),
            )

    async def _attach_people(self, matches: list[TrainerMatch]) -> None:
        ids = {m.trainer_id for m in matches} | {m.student_id for m in matches}
        people = await UserRepository(self.db_path).summaries(list(ids))
        for match in matches:
            match.trainer = people.get(match.trainer_id)
            match.student = people.get(match.student_id)

    def _row_to_entity(self, row: aiosqlite.Row) -> TrainerMatch:
        return TrainerMatch(
            id=row["id"],
            gym_id=row["gym_id"],
            trainer_id=row["trainer_id"],
            student_id=row["student_id"],
            status=MatchStatus(row["status"]),
            created_at=parse_timestamp(row["created_at"]),
            updated_at=parse_timestamp(row["updated_at"]),
        )

"""SQLite implementation of the workflow repository."""

from __future__ import annotations

import asyncio
import json
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from ..errors import StepNotFound, WorkflowNotFound
from ..models import Project, StepRecord, SubTaskRecord, WorkflowInstance
from .repository import WorkflowRepository


def _ts(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _flag(value: Optional[int]) -> Optional[bool]:
    return None if value is None else bool(value)


class SQLiteWorkflowRepository(WorkflowRepository):
    """Persist projects and workflow state using SQLite."""

    def __init__(self, db_path: str | Path):
        self.db_path = str(db_path)
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._ensure_schema()

    # ------------------------------------------------------------------
    # Schema management
    def _ensure_schema(self) -> None:
        with self._lock, self._conn:
            self._conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS projects (
                    id TEXT PRIMARY KEY,
                    project_type TEXT,
                    is_insurance_claim INTEGER
                );
                CREATE TABLE IF NOT EXISTS workflows (
                    project_id TEXT PRIMARY KEY,
                    workflow_type TEXT NOT NULL,
                    status TEXT NOT NULL,
                    overall_progress INTEGER NOT NULL DEFAULT 0,
                    current_step_index INTEGER NOT NULL DEFAULT 0
                );
                CREATE TABLE IF NOT EXISTS workflow_steps (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    project_id TEXT NOT NULL,
                    step_id TEXT NOT NULL,
                    step_name TEXT NOT NULL,
                    description TEXT,
                    phase TEXT,
                    step_order INTEGER NOT NULL,
                    is_completed INTEGER NOT NULL DEFAULT 0,
                    completed_at TEXT,
                    actual_start_date TEXT,
                    dependencies TEXT NOT NULL,
                    assigned_role TEXT,
                    UNIQUE (project_id, step_id)
                );
                CREATE TABLE IF NOT EXISTS workflow_sub_tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    project_id TEXT NOT NULL,
                    step_id TEXT NOT NULL,
                    sub_task_id TEXT NOT NULL,
                    sub_task_name TEXT NOT NULL,
                    is_completed INTEGER NOT NULL DEFAULT 0,
                    completed_at TEXT,
                    UNIQUE (project_id, step_id, sub_task_id)
                );
                """
            )

    # ------------------------------------------------------------------
    # Helper methods
    def _execute(self, query: str, *params: Any) -> int:
        with self._lock, self._conn:
            cur = self._conn.execute(query, params)
            return cur.rowcount

    def _fetchone(self, query: str, *params: Any) -> sqlite3.Row | None:
        with self._lock:
            return self._conn.execute(query, params).fetchone()

    def _fetchall(self, query: str, *params: Any) -> list[sqlite3.Row]:
        with self._lock:
            return self._conn.execute(query, params).fetchall()

    def _require_workflow(self, project_id: str) -> None:
        row = self._fetchone("SELECT 1 FROM workflows WHERE project_id = ?", project_id)
        if row is None:
            raise WorkflowNotFound(f"Workflow for project {project_id} not found")

    def _load_workflow(self, project_id: str) -> WorkflowInstance | None:
        row = self._fetchone(
            "SELECT project_id, workflow_type, status, overall_progress, current_step_index "
            "FROM workflows WHERE project_id = ?",
            project_id,
        )
        if not row:
            return None
        sub_rows = self._fetchall(
            "SELECT step_id, sub_task_id, sub_task_name, is_completed, completed_at "
            "FROM workflow_sub_tasks WHERE project_id = ? ORDER BY id",
            project_id,
        )
        sub_tasks: dict[str, list[SubTaskRecord]] = {}
        for r in sub_rows:
            sub_tasks.setdefault(r["step_id"], []).append(
                SubTaskRecord(
                    sub_task_id=r["sub_task_id"],
                    sub_task_name=r["sub_task_name"],
                    is_completed=bool(r["is_completed"]),
                    completed_at=_ts(r["completed_at"]),
                )
            )
        step_rows = self._fetchall(
            "SELECT step_id, step_name, description, phase, step_order, is_completed, "
            "completed_at, actual_start_date, dependencies, assigned_role "
            "FROM workflow_steps WHERE project_id = ? ORDER BY step_order, id",
            project_id,
        )
        steps = [
            StepRecord(
                step_id=r["step_id"],
                step_name=r["step_name"],
                description=r["description"],
                phase=r["phase"],
                step_order=r["step_order"],
                is_completed=bool(r["is_completed"]),
                completed_at=_ts(r["completed_at"]),
                actual_start_date=_ts(r["actual_start_date"]),
                dependencies=json.loads(r["dependencies"]),
                assigned_role=r["assigned_role"],
                sub_tasks=sub_tasks.get(r["step_id"], []),
            )
            for r in step_rows
        ]
        return WorkflowInstance(
            project_id=row["project_id"],
            workflow_type=row["workflow_type"],
            status=row["status"],
            overall_progress=row["overall_progress"],
            current_step_index=row["current_step_index"],
            steps=steps,
        )

    def _load_project(self, row: sqlite3.Row) -> Project:
        return Project(
            id=row["id"],
            project_type=row["project_type"],
            is_insurance_claim=_flag(row["is_insurance_claim"]),
            workflow=self._load_workflow(row["id"]),
        )

    def _delete_project(self, project_id: str) -> None:
        with self._lock, self._conn:
            for table, column in (
                ("workflow_sub_tasks", "project_id"),
                ("workflow_steps", "project_id"),
                ("workflows", "project_id"),
                ("projects", "id"),
            ):
                self._conn.execute(f"DELETE FROM {table} WHERE {column} = ?", (project_id,))

    def _insert_workflow(self, workflow: WorkflowInstance) -> None:
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT INTO workflows (project_id, workflow_type, status, overall_progress, current_step_index) "
                "VALUES (?, ?, ?, ?, ?)",
                (
                    workflow.project_id,
                    workflow.workflow_type,
                    workflow.status,
                    workflow.overall_progress,
                    workflow.current_step_index,
                ),
            )
            for step in workflow.steps or []:
                self._conn.execute(
                    "INSERT INTO workflow_steps (project_id, step_id, step_name, description, phase, "
                    "step_order, is_completed, completed_at, actual_start_date, dependencies, assigned_role) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        workflow.project_id,
                        step.step_id,
                        step.step_name,
                        step.description,
                        step.phase,
                        step.step_order,
                        int(step.is_completed),
                        step.completed_at.isoformat() if step.completed_at else None,
                        step.actual_start_date.isoformat() if step.actual_start_date else None,
                        json.dumps(step.dependencies),
                        step.assigned_role,
                    ),
                )
                self._conn.executemany(
                    "INSERT INTO workflow_sub_tasks (project_id, step_id, sub_task_id, sub_task_name, "
                    "is_completed, completed_at) VALUES (?, ?, ?, ?, ?, ?)",
                    [
                        (
                            workflow.project_id,
                            step.step_id,
                            s.sub_task_id,
                            s.sub_task_name,
                            int(s.is_completed),
                            s.completed_at.isoformat() if s.completed_at else None,
                        )
                        for s in step.sub_tasks
                    ],
                )

    def _set_step_completed(self, project_id: str, step_id: str, completed: bool) -> StepRecord:
        self._require_workflow(project_id)
        now = datetime.now(timezone.utc).isoformat()
        with self._lock, self._conn:
            cur = self._conn.execute(
                "UPDATE workflow_steps SET is_completed = ?, completed_at = ? "
                "WHERE project_id = ? AND step_id = ?",
                (int(completed), now if completed else None, project_id, step_id),
            )
            if cur.rowcount == 0:
                raise StepNotFound(f"Workflow step {step_id} not found for project {project_id}")
            if completed:
                self._conn.execute(
                    "UPDATE workflow_sub_tasks SET is_completed = 1, completed_at = ? "
                    "WHERE project_id = ? AND step_id = ? AND is_completed = 0",
                    (now, project_id, step_id),
                )
        workflow = self._load_workflow(project_id)
        return workflow.step(step_id)

    def _set_sub_task_completed(
        self, project_id: str, step_id: str, sub_task_id: str, completed: bool
    ) -> SubTaskRecord:
        self._require_workflow(project_id)
        now = datetime.now(timezone.utc)
        updated = self._execute(
            "UPDATE workflow_sub_tasks SET is_completed = ?, completed_at = ? "
            "WHERE project_id = ? AND step_id = ? AND sub_task_id = ?",
            int(completed),
            now.isoformat() if completed else None,
            project_id,
            step_id,
            sub_task_id,
        )
        if updated == 0:
            raise StepNotFound(f"Workflow sub-task {sub_task_id} not found for step {step_id}")
        row = self._fetchone(
            "SELECT sub_task_id, sub_task_name, is_completed, completed_at FROM workflow_sub_tasks "
            "WHERE project_id = ? AND step_id = ? AND sub_task_id = ?",
            project_id,
            step_id,
            sub_task_id,
        )
        return SubTaskRecord(
            sub_task_id=row["sub_task_id"],
            sub_task_name=row["sub_task_name"],
            is_completed=bool(row["is_completed"]),
            completed_at=_ts(row["completed_at"]),
        )

    # ------------------------------------------------------------------
    # Repository API
    async def save_project(self, project: Project) -> None:
        if not project.id:
            raise ValueError("Project id is required to persist a project")
        await asyncio.to_thread(
            self._execute,
            "INSERT INTO projects (id, project_type, is_insurance_claim) VALUES (?, ?, ?) "
            "ON CONFLICT(id) DO UPDATE SET project_type = excluded.project_type, "
            "is_insurance_claim = excluded.is_insurance_claim",
            project.id,
            project.project_type,
            None if project.is_insurance_claim is None else int(project.is_insurance_claim),
        )

    async def get_project(self, project_id: str) -> Project | None:
        row = await asyncio.to_thread(
            self._fetchone,
            "SELECT id, project_type, is_insurance_claim FROM projects WHERE id = ?",
            project_id,
        )
        if not row:
            return None
        return await asyncio.to_thread(self._load_project, row)

    async def list_projects(self) -> list[Project]:
        rows = await asyncio.to_thread(
            self._fetchall,
            "SELECT id, project_type, is_insurance_claim FROM projects ORDER BY id",
        )
        return [await asyncio.to_thread(self._load_project, row) for row in rows]

    async def delete_project(self, project_id: str) -> None:
        await asyncio.to_thread(self._delete_project, project_id)

    async def create_workflow(self, workflow: WorkflowInstance) -> None:
        row = await asyncio.to_thread(
            self._fetchone, "SELECT 1 FROM projects WHERE id = ?", workflow.project_id
        )
        if row is None:
            raise WorkflowNotFound(f"Project {workflow.project_id} not found")
        await asyncio.to_thread(self._insert_workflow, workflow)

    async def get_workflow(self, project_id: str) -> WorkflowInstance | None:
        return await asyncio.to_thread(self._load_workflow, project_id)

    async def mark_step_completed(
        self, project_id: str, step_id: str, completed: bool = True
    ) -> StepRecord:
        return await asyncio.to_thread(self._set_step_completed, project_id, step_id, completed)

    async def mark_sub_task_completed(
        self, project_id: str, step_id: str, sub_task_id: str, completed: bool = True
    ) -> SubTaskRecord:
        return await asyncio.to_thread(
            self._set_sub_task_completed, project_id, step_id, sub_task_id, completed
        )

    async def update_progress(
        self,
        project_id: str,
        overall_progress: int,
        status: str,
        current_step_index: int,
    ) -> None:
        updated = await asyncio.to_thread(
            self._execute,
            "UPDATE workflows SET overall_progress = ?, status = ?, current_step_index = ? "
            "WHERE project_id = ?",
            overall_progress,
            status,
            current_step_index,
            project_id,
        )
        if updated == 0:
            raise WorkflowNotFound(f"Workflow for project {project_id} not found")

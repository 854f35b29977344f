from __future__ import annotations

import asyncio
import codecs
import os
import sys
import time
from collections import deque
from typing import Sequence, TextIO

from rich.console import Console
from rich.text import Text

from taskhub.graph import Task, TaskGraph

from .types import ExecutionResult, OutputChunk, RunSummary, Stream

_READ_SIZE = 64 * 1024


class Executor:
    """
    Run every task of a graph as its own process.

    A task starts as soon as all of its dependencies have finished, whatever
    their outcome. Output is buffered per task and written as one block when
    the process exits.
    """

    def __init__(
        self,
        graph: TaskGraph,
        runner: Sequence[str],
        *,
        origin: str | None = None,
        out: TextIO | None = None,
        err: TextIO | None = None,
    ):
        self.graph = graph
        self.runner = list(runner)
        self.origin = origin
        self._out = out
        self._err = err

    @property
    def out(self) -> TextIO:
        return self._out or sys.stdout

    @property
    def err(self) -> TextIO:
        return self._err or sys.stderr

    def run(self) -> RunSummary:
        return asyncio.run(self.run_async())

    async def run_async(self) -> RunSummary:
        # Integrity errors surface before any process is spawned.
        self.graph.validate()
        summary = RunSummary(self.origin)

        waiting = {tid: len(self.graph.deps_of(tid)) for tid in self.graph.task_ids()}
        dependents = self.graph.dependents()
        ready = deque(tid for tid, count in waiting.items() if count == 0)
        running: set[asyncio.Task[ExecutionResult]] = set()

        while ready or running:
            while ready:
                task = self.graph.get_task(ready.popleft())
                running.add(asyncio.create_task(self.execute(task, summary), name=task.id))

            done, running = await asyncio.wait(running, return_when=asyncio.FIRST_COMPLETED)
            for finished in sorted(done, key=lambda t: t.get_name()):
                result = finished.result()
                for child in dependents[result.task_id]:
                    waiting[child] -= 1
                    if waiting[child] == 0:
                        ready.append(child)

        self._print_footer(summary)
        return summary

    async def execute(self, task: Task, summary: RunSummary) -> ExecutionResult:
        chunks: list[OutputChunk] = []
        returncode: int | None = None
        error: str | None = None

        operations = ", ".join(task.operations)
        self._say(self.out, f"Running [{operations}] on {task.id}", before="\n")
        start = time.monotonic()
        try:
            proc = await asyncio.create_subprocess_exec(
                *self.runner,
                *task.args,
                cwd=task.working_dir,
                env={**os.environ, **task.env},
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            error = f"failed to start {self.runner[0]}: {exc}"
            chunks.append(OutputChunk(Stream.STDERR, f"{error}\n".encode()))
        else:
            await asyncio.gather(
                _pump(proc.stdout, Stream.STDOUT, chunks),
                _pump(proc.stderr, Stream.STDERR, chunks),
            )
            returncode = await proc.wait()
            if returncode != 0:
                error = f"exit code = {returncode}"

        result = ExecutionResult(
            task.id, returncode, error, chunks, time.monotonic() - start
        )
        # No await from here on: the block and the bookkeeping land together.
        self._flush(result)
        summary.record(result)
        return result

    def _flush(self, result: ExecutionResult) -> None:
        decoders = {
            stream: codecs.getincrementaldecoder("utf-8")(errors="replace")
            for stream in Stream
        }
        sinks = {Stream.STDOUT: self.out, Stream.STDERR: self.err}

        self._say(self.out, f"From {result.task_id}:\n", before="\n")
        for chunk in result.output:
            sinks[chunk.stream].write(decoders[chunk.stream].decode(chunk.data))
        for stream, decoder in decoders.items():
            tail = decoder.decode(b"", final=True)
            if tail:
                sinks[stream].write(tail)
        if result.failed:
            self._say(self.err, f"{result.task_id} failed: {result.error}", style="red")

        self.out.flush()
        self.err.flush()

    def _print_footer(self, summary: RunSummary) -> None:
        total = len(summary.results)
        if summary.ok:
            status = f"{total} task(s) succeeded"
        else:
            status = f"{summary.failure_count} of {total} task(s) failed"
        self._say(self.out, f"From {summary.origin or 'taskhub'}: {status}", before="\n")

    def _say(
        self, sink: TextIO, message: str, *, style: str = "cyan", before: str = ""
    ) -> None:
        console = Console(file=sink, highlight=False, soft_wrap=True)
        console.print(Text.assemble(before, (">> ", style), message))


async def _pump(
    stream: asyncio.StreamReader | None, tag: Stream, chunks: list[OutputChunk]
) -> None:
    if stream is None:
        return
    while True:
        data = await stream.read(_READ_SIZE)
        if not data:
            return
        chunks.append(OutputChunk(tag, data))

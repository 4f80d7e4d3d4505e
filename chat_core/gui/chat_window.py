import asyncio
import tkinter as tk
from tkinter import scrolledtext

from chat_core.api.service import ChatSession, get_default_session
from chat_core.domain.models import TranscriptSnapshot


class ChatWindow:
    """只做投影的聊天窗口：状态全部来自 ChatSession 的快照。"""

    def __init__(self, root, session: ChatSession):
        self.root = root
        self.root.title("Simple Chat")
        self.session = session
        header = tk.Frame(root)
        header.pack(fill=tk.X)
        tk.Label(header, text="Simple Chat").pack(side=tk.LEFT)
        tk.Button(header, text="クリア", command=self.on_clear).pack(side=tk.RIGHT)
        self.name_var = tk.StringVar(value=session.display_name)
        self.name_entry = tk.Entry(header, textvariable=self.name_var, width=16)
        self.name_entry.pack(side=tk.RIGHT)
        self.name_entry.bind("<KeyRelease>", self.on_name_change)
        tk.Label(header, text="名前").pack(side=tk.RIGHT)
        self.chat = scrolledtext.ScrolledText(root, width=72, height=22)
        self.chat.pack(fill=tk.BOTH, expand=True)
        self.chat.tag_config("mine", justify=tk.RIGHT, foreground="#2563eb")
        self.chat.tag_config("other", justify=tk.LEFT, foreground="#111827")
        self.chat.tag_config("meta", foreground="#6b7280")
        footer = tk.Frame(root)
        footer.pack(fill=tk.X)
        self.entry = tk.Entry(footer)
        self.entry.pack(side=tk.LEFT, fill=tk.X, expand=True)
        self.entry.bind("<Return>", self.on_send_event)
        self.send_btn = tk.Button(footer, text="送信", command=self.on_send)
        self.send_btn.pack(side=tk.LEFT)
        self.status = tk.Label(root, text="準備完了")
        self.status.pack(fill=tk.X)
        self._unsubscribe = session.subscribe(self.render)
        self.render(session.snapshot())

    def on_name_change(self, event=None):
        self.session.set_display_name(self.name_var.get())
        self.render(self.session.snapshot())

    def on_send(self):
        self.session.set_display_name(self.name_var.get())
        task = self.session.submit(self.entry.get())
        if task is not None:
            self.entry.delete(0, tk.END)

    def on_send_event(self, event):
        self.on_send()
        return "break"

    def on_clear(self):
        self.session.clear()

    def render(self, snap: TranscriptSnapshot):
        me = self.session.user_name
        self.chat.config(state=tk.NORMAL)
        self.chat.delete(1.0, tk.END)
        for m in snap.messages:
            tag = "mine" if m.author == me else "other"
            self.chat.insert(tk.END, f"{m.author}  {m.time}\n", (tag, "meta"))
            self.chat.insert(tk.END, f"{m.text}\n\n", tag)
        self.chat.config(state=tk.DISABLED)
        self.chat.see(tk.END)
        self.send_btn.config(state=tk.DISABLED if snap.busy else tk.NORMAL)
        self.status.config(text="返信待ち..." if snap.busy else "準備完了")

    def close(self):
        self._unsubscribe()
        self.root.destroy()


async def run_app(session: ChatSession, interval: float = 0.02) -> None:
    """在 asyncio 事件循环中驱动 Tk，所有状态变更都发生在同一线程。"""
    root = tk.Tk()
    app = ChatWindow(root, session)
    closed = asyncio.Event()

    def on_close():
        app.close()
        closed.set()

    root.protocol("WM_DELETE_WINDOW", on_close)
    while not closed.is_set():
        root.update()
        await asyncio.sleep(interval)


def main():
    asyncio.run(run_app(get_default_session()))


if __name__ == "__main__":
    main()

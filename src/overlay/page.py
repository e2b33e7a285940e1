"""
OBS 브라우저 소스용 오버레이 페이지.

URL 파라미터:
- mode=current|next  (기본 current)
- interval=ms        (기본 250, 100~2000 으로 제한)
- hideEmpty=0|1      (기본 1)
- preview=1          (데모 텍스트)

규칙은 sync.py 의 OverlaySyncClient 와 같다. 필드별로 텍스트가 바뀐 경우에만 애니메이션.
"""

OVERLAY_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>On-Air Overlay</title>
  <style>
    :root {
      --title-font-family: system-ui;
      --pair-font-family: system-ui;
      --title-size: 48px;
      --pair-size: 40px;
      --title-color: #ffffff;
      --pair-color: #ffffff;
    }
    * { margin: 0; padding: 0; box-sizing: border-box; }
    body { background: transparent; overflow: hidden; padding: 24px; }
    body.preview { background: #1e293b; }

    .line { display: block; min-height: 1.2em; text-shadow: 0 2px 6px rgba(0,0,0,0.6); }
    #title { font-family: var(--title-font-family); font-size: var(--title-size); color: var(--title-color); }
    #pair { font-family: var(--pair-font-family); font-size: var(--pair-size); color: var(--pair-color); margin-top: 8px; }
    #pair-leader, #pair-tail { display: inline-block; }
    .hidden { display: none !important; }

    .play { animation-duration: var(--anim-ms, 500ms); animation-fill-mode: both; animation-timing-function: ease-out; }
    .play[data-anim="fade"] { animation-name: a-fade; }
    .play[data-anim="slide-up"] { animation-name: a-slide-up; }
    .play[data-anim="slide-left"] { animation-name: a-slide-left; }
    .play[data-anim="zoom"] { animation-name: a-zoom; }
    .play[data-anim="typewriter"] { animation-name: a-type; overflow: hidden; white-space: nowrap; }

    @keyframes a-fade { from { opacity: 0; } to { opacity: 1; } }
    @keyframes a-slide-up { from { opacity: 0; transform: translateY(24px); } to { opacity: 1; transform: none; } }
    @keyframes a-slide-left { from { opacity: 0; transform: translateX(40px); } to { opacity: 1; transform: none; } }
    @keyframes a-zoom { from { opacity: 0; transform: scale(0.85); } to { opacity: 1; transform: none; } }
    @keyframes a-type { from { max-width: 0; } to { max-width: 100%; } }
  </style>
</head>
<body>
  <div class="line" id="title"></div>
  <div class="line" id="pair"><span id="pair-leader"></span><span id="pair-tail" class="hidden"> — <span id="pair-follower"></span></span></div>

  <script>
  (function () {
    var qs = new URLSearchParams(window.location.search);
    var mode = (qs.get('mode') || 'current').toLowerCase();
    var interval = Number(qs.get('interval') || 250);
    var hideEmpty = (qs.get('hideEmpty') || '1') !== '0';
    var preview = (qs.get('preview') || '0') === '1';
    if (preview) document.body.classList.add('preview');

    var elTitle = document.getElementById('title');
    var elPair = document.getElementById('pair');
    var elLeader = document.getElementById('pair-leader');
    var elTail = document.getElementById('pair-tail');
    var elFollower = document.getElementById('pair-follower');

    var settings = null;
    var settingsVersion = null;
    var lastApplyId = null;
    var last = { title: null, leader: null, follower: null, tail: null };

    function setVisible(el, isVisible) {
      if (!hideEmpty) { el.classList.remove('hidden'); return; }
      el.classList.toggle('hidden', !isVisible);
    }

    function anim(name) {
      if (!settings) return null;
      var t = String(settings[name + 'AnimType'] || 'none');
      if (t === 'none') return null;
      return { type: t, ms: Math.max(0, Number(settings[name + 'AnimMs'] || 0)) };
    }

    function play(el, a) {
      if (!a) return;
      el.style.setProperty('--anim-ms', a.ms + 'ms');
      el.setAttribute('data-anim', a.type);
      el.classList.remove('play');
      void el.offsetWidth; // reflow: restart, not skip
      el.classList.add('play');
    }

    function texts(state) {
      var hidden = Boolean(state.hidden);
      if (mode === 'next') {
        return { title: hidden ? '' : String(state.nextTitle || ''), leader: '', follower: '', withoutPair: false };
      }
      return {
        title: hidden ? '' : String(state.title || ''),
        leader: hidden ? '' : String(state.leader || ''),
        follower: hidden ? '' : String(state.follower || ''),
        withoutPair: Boolean(state.withoutPair)
      };
    }

    function render(state) {
      var t = texts(state);
      if (t.title !== last.title) {
        elTitle.textContent = t.title;
        play(elTitle, anim('title'));
        last.title = t.title;
      }

      var showTail = Boolean(!t.withoutPair && t.follower.trim());
      var leaderChanged = t.leader !== last.leader;
      var followerChanged = t.follower !== last.follower;
      var tailChanged = showTail !== last.tail;

      if (leaderChanged) {
        elLeader.textContent = t.leader;
        if (t.leader) play(elLeader, anim('leader'));
        last.leader = t.leader;
      }
      if (tailChanged) elTail.classList.toggle('hidden', !showTail);
      if (followerChanged || tailChanged) {
        elFollower.textContent = showTail ? t.follower : '';
        if (followerChanged && showTail) play(elTail, anim('follower'));
        last.follower = t.follower;
      }
      last.tail = showTail;

      setVisible(elTitle, Boolean(t.title.trim()));
      setVisible(elPair, Boolean(t.leader.trim() || showTail));
    }

    function applyStyle(s) {
      var root = document.documentElement.style;
      if (s.titleFont) root.setProperty('--title-font-family', String(s.titleFont));
      if (s.pairFont) root.setProperty('--pair-font-family', String(s.pairFont));
      if (isFinite(Number(s.titleSizePx))) root.setProperty('--title-size', Number(s.titleSizePx) + 'px');
      if (isFinite(Number(s.pairSizePx))) root.setProperty('--pair-size', Number(s.pairSizePx) + 'px');
      if (s.titleColor) root.setProperty('--title-color', String(s.titleColor));
      if (s.pairColor) root.setProperty('--pair-color', String(s.pairColor));
    }

    function loadSettings() {
      return fetch('/api/overlay-settings', { cache: 'no-store' })
        .then(function (r) { return r.ok ? r.json() : null; })
        .then(function (s) {
          if (!s || typeof s !== 'object') return;
          if (settingsVersion !== null && s.version === settingsVersion) return;
          settings = s;
          settingsVersion = s.version;
          applyStyle(s);
        })
        .catch(function () { /* keep last style */ });
    }

    function tick() {
      if (preview) {
        render({ hidden: false, title: mode === 'next' ? 'NEXT' : 'Jack & Jill All Star Finals',
                 nextTitle: 'NEXT', leader: 'Vasya Ivanov', follower: 'Masha Ivanova', withoutPair: false });
        return;
      }
      fetch('/api/overlay-state', { cache: 'no-store' })
        .then(function (r) { return r.ok ? r.json() : null; })
        .then(function (state) {
          if (!state || typeof state !== 'object') return;
          var applyId = Number(state.applyId || 0);
          if (lastApplyId === null || applyId !== lastApplyId) {
            render(state);
            lastApplyId = applyId;
          }
        })
        .catch(function () { /* keep last rendered content */ });
    }

    loadSettings().then(tick);
    setInterval(tick, Math.max(100, Math.min(2000, interval)));
    setInterval(loadSettings, 1000);
  })();
  </script>
</body>
</html>
"""

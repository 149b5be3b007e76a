"""Node.js harness that evaluates artifact code inside a vm context.

The harness reads one JSON request from stdin:

    {"code", "input", "allowedModules", "timeoutMs", "maxOutputSize", "typescript"}

and writes one JSON report to stdout once the event loop drains, an
uncaught error occurs, or the synchronous run fails:

    {"stdout": [...], "stderr": [...], "failure": null | "message"}
"""

NODE_HARNESS = r"""
'use strict';
const fs = require('fs');
const vm = require('vm');
const Module = require('module');

const request = JSON.parse(fs.readFileSync(0, 'utf8'));
const stdout = [];
const stderr = [];
let failure = null;
let outputBytes = 0;
let emitted = false;

function describe(value) {
  if (typeof value === 'object' && value !== null) {
    try {
      return JSON.stringify(value);
    } catch (err) {
      return String(value);
    }
  }
  return String(value);
}

function capture(buffer, prefix, args) {
  const line = prefix + args.map(describe).join(' ');
  outputBytes += Buffer.byteLength(line, 'utf8') + 1;
  if (outputBytes > request.maxOutputSize) {
    if (failure === null) {
      failure = 'Output size limit exceeded';
    }
    return;
  }
  buffer.push(line);
}

function messageOf(err) {
  return err && err.message ? err.message : String(err);
}

function emit(done) {
  if (emitted) {
    if (done) {
      done();
    }
    return;
  }
  emitted = true;
  process.stdout.write(JSON.stringify({ stdout, stderr, failure }), done);
}

function fail(err) {
  if (failure === null) {
    failure = messageOf(err);
  }
  emit(() => process.exit(0));
}

const sandbox = {
  console: {
    log: (...args) => capture(stdout, '', args),
    info: (...args) => capture(stdout, '[INFO] ', args),
    warn: (...args) => capture(stdout, '[WARN] ', args),
    error: (...args) => capture(stderr, '', args),
  },
  require: (name) => {
    if (request.allowedModules.includes(name)) {
      return require(name);
    }
    throw new Error(`Module '${name}' is not allowed`);
  },
  input: request.input,
  process: { env: {}, version: process.version, platform: 'sandbox' },
  setTimeout,
  setInterval,
  clearTimeout,
  clearInterval,
};

process.on('uncaughtException', fail);
process.on('unhandledRejection', fail);
process.on('beforeExit', () => emit());

let code = request.code;
if (request.typescript && typeof Module.stripTypeScriptTypes === 'function') {
  code = Module.stripTypeScriptTypes(code);
}

try {
  const result = vm.runInNewContext(code, sandbox, {
    timeout: request.timeoutMs,
    filename: 'artifact.js',
  });
  if (result !== undefined) {
    capture(stdout, '', [result]);
  }
} catch (err) {
  fail(err);
}
"""

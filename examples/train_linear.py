"""极简线性回归训练示例：手写梯度 + tiny_optim 规则。"""

from __future__ import annotations

import numpy as np

import tiny_optim as to


def make_data(n: int = 512, dim: int = 8, noise: float = 0.1):
    rng = np.random.default_rng(0)
    w_true = rng.normal(size=(dim,))
    b_true = 0.5
    x = rng.normal(size=(n, dim))
    y = x @ w_true + b_true + noise * rng.normal(size=(n,))
    return x, y


def batches(x, y, batch_size, rng):
    order = rng.permutation(len(x))
    for i in range(0, len(x), batch_size):
        idx = order[i:i + batch_size]
        yield x[idx], y[idx]


def main():
    rng = np.random.default_rng(1)
    x_all, y_all = make_data()

    params = {"w": np.zeros(x_all.shape[1]), "b": np.zeros(())}
    # 规则可由 TINY_OPTIM_RULE 指向的 YAML 文件覆盖
    rule = to.load_rule_from_env()
    if rule is None:
        rule = to.Chain(to.ClipNorm(1.0), to.Adam(0.05))
    print(f"rule: {rule!r}")

    # 每个参数一份状态
    states = {name: to.init(rule, p) for name, p in params.items()}

    for epoch in range(10):
        total_loss = 0.0
        num_batches = 0

        for xb, yb in batches(x_all, y_all, 64, rng):
            err = xb @ params["w"] + params["b"] - yb
            total_loss += float(np.mean(err ** 2))
            num_batches += 1

            grads = {
                "w": 2 * xb.T @ err / len(xb),
                "b": np.asarray(2 * err.mean()),
            }
            for name in params:
                states[name], dx = to.apply(rule, states[name], params[name], grads[name])
                params[name] = params[name] - dx

        print(f"epoch {epoch + 1}: loss={total_loss / num_batches:.4f}")


if __name__ == "__main__":
    main()

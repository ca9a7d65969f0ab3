from __future__ import annotations

from dataclasses import dataclass

from .models import Parameters
from .utils import half_squared_error, sigmoid, sigmoid_prime


@dataclass(frozen=True)
class Example:
    x: tuple[float, ...]
    y: float

    @classmethod
    def of(cls, x: list[float] | tuple[float, ...], y: float) -> Example:
        return cls(x=tuple(float(v) for v in x), y=float(y))


@dataclass(frozen=True)
class ForwardTrace:
    x: tuple[float, ...]
    y: float
    hidden_pre_activations: list[float]
    hidden_activations: list[float]
    output_pre_activation: float
    prediction: float
    loss: float


@dataclass(frozen=True)
class BackwardTrace:
    d_loss_d_prediction: float
    d_prediction_d_output_pre_activation: float
    d_loss_d_output_pre_activation: float
    d_loss_d_hidden_to_output_weights: list[float]
    d_loss_d_hidden_activations: list[float]
    d_activation_d_pre_activations: list[float]
    d_loss_d_hidden_pre_activations: list[float]
    d_loss_d_input_to_hidden_weights: list[list[float]]
    d_loss_d_hidden_biases: list[float]
    d_loss_d_output_bias: float

    def parameter_gradients(self) -> Parameters:
        """Gradients of the loss laid out exactly like the parameters they belong to."""
        return Parameters(
            input_to_hidden_weights=[row[:] for row in self.d_loss_d_input_to_hidden_weights],
            hidden_biases=self.d_loss_d_hidden_biases[:],
            hidden_to_output_weights=self.d_loss_d_hidden_to_output_weights[:],
            output_bias=self.d_loss_d_output_bias,
        )


def forward(example: Example, params: Parameters) -> ForwardTrace:
    if len(example.x) != params.input_count:
        raise ValueError(f"example has {len(example.x)} inputs, network expects {params.input_count}")

    x = example.x
    z_h = [sum(w * xi for w, xi in zip(w_row, x)) + b for w_row, b in zip(params.input_to_hidden_weights, params.hidden_biases)]
    h = [sigmoid(z) for z in z_h]
    z_out = sum(w * hj for w, hj in zip(params.hidden_to_output_weights, h)) + params.output_bias
    y_hat = sigmoid(z_out)
    return ForwardTrace(
        x=x,
        y=example.y,
        hidden_pre_activations=z_h,
        hidden_activations=h,
        output_pre_activation=z_out,
        prediction=y_hat,
        loss=half_squared_error(y_hat, example.y),
    )


def backward(trace: ForwardTrace, params: Parameters) -> BackwardTrace:
    """Chain rule by hand, output layer first.

    `trace` must come from `forward` on the same parameters.
    """
    d_pred = trace.prediction - trace.y
    d_pred_d_zout = sigmoid_prime(trace.output_pre_activation)
    d_zout = d_pred * d_pred_d_zout

    grad_w_ho = []
    grad_h = []
    slope_h = []
    grad_z_h = []
    grad_w_ih = []
    grad_b_h = []
    for j, (z, h) in enumerate(zip(trace.hidden_pre_activations, trace.hidden_activations)):
        grad_w_ho.append(d_zout * h)
        dh = d_zout * params.hidden_to_output_weights[j]
        grad_h.append(dh)
        slope = sigmoid_prime(z)
        slope_h.append(slope)
        dz = dh * slope
        grad_z_h.append(dz)
        grad_w_ih.append([dz * xi for xi in trace.x])
        grad_b_h.append(dz)

    return BackwardTrace(
        d_loss_d_prediction=d_pred,
        d_prediction_d_output_pre_activation=d_pred_d_zout,
        d_loss_d_output_pre_activation=d_zout,
        d_loss_d_hidden_to_output_weights=grad_w_ho,
        d_loss_d_hidden_activations=grad_h,
        d_activation_d_pre_activations=slope_h,
        d_loss_d_hidden_pre_activations=grad_z_h,
        d_loss_d_input_to_hidden_weights=grad_w_ih,
        d_loss_d_hidden_biases=grad_b_h,
        d_loss_d_output_bias=d_zout,
    )
